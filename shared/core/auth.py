from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import ROLE_HIERARCHY, UserRole
from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.core.schemas import UserToken
from shared.core.database import get_db

security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None):
    payload = data.copy()

    expires = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload['exp'] = expires

    token = jwt.encode(payload, settings.JWT_SECRET,
                       algorithm=settings.JWT_ALGORITHM)
    return token


def token_for_user(user: Users) -> str:
    return create_access_token({
        "user_id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "department": user.department,
    })


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        user = UserToken(**payload)
    except (JWTError, ValueError):
        return error_response(
            message="Invalid or expired token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not user.user_id:
        return error_response(
            message="Invalid token structure",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    return user


def validate_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    if credentials is None:
        return error_response(
            message="Unauthorized",
            status_code=AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    user_data = verify_token(credentials.credentials)

    # Role and activity come from the directory, not from the token
    user = db.query(Users).filter(Users.id == user_data.user_id).first()

    if not user:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.AUTHENTICATION_USER_INVALID,
            http_status=404
        )

    if not user.is_active:
        return error_response(
            message="User is not active. Access denied",
            status_code=AppStatusCode.AUTHENTICATION_USER_INACTIVE,
            http_status=403
        )

    user_data.role = user.role
    user_data.email = user.email
    user_data.name = user.name
    user_data.department = user.department
    return user_data


def has_role(actor: Optional[UserToken], required_role: UserRole | str) -> bool:
    if actor is None:
        return False
    required = required_role.value if isinstance(
        required_role, UserRole) else required_role
    return ROLE_HIERARCHY.get(actor.role, 0) >= ROLE_HIERARCHY.get(required, 0)


def ensure_role(actor: Optional[UserToken], required_role: UserRole | str):
    """Authorization precondition shared by every mutating operation."""
    if actor is None:
        return error_response(
            message="Unauthorized",
            status_code=AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    if not has_role(actor, required_role):
        return error_response(
            message="Insufficient permissions",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=status.HTTP_403_FORBIDDEN
        )
    return actor


def allow_admin(current_user: UserToken = Depends(validate_current_token)):
    return ensure_role(current_user, UserRole.ADMIN)
