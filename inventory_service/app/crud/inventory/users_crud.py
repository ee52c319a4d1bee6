# app/crud/inventory/users_crud.py
import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from shared.core.auth import ensure_role, has_role
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import error_response
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole
from . import audit_crud
from .assignments_crud import assignment_out
from ...enum.inventory_enum import AuditAction
from ...helpers.crud_helper import commit_or_fail, enum_values
from ...helpers.revalidation import revalidate_paths
from ...models.inventory.asset_assignments import AssetAssignment
from ...schemas.inventory.assignments_schemas import AssignmentOut
from ...schemas.inventory.users_schemas import UserCreate, UserListResponse, UserOut, UsersRequest, UserUpdate

logger = logging.getLogger(__name__)

# Only admins may touch these
PRIVILEGED_USER_FIELDS = ("role", "is_active")


def get_users(db: Session, params: UsersRequest) -> UserListResponse:
    query = db.query(Users)

    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(
            Users.name.ilike(search_term),
            Users.email.ilike(search_term),
            Users.employee_id.ilike(search_term),
            Users.department.ilike(search_term)
        ))
    if params.role and params.role.lower() != "all":
        query = query.filter(Users.role == params.role.lower())
    if params.department:
        query = query.filter(Users.department.ilike(f"%{params.department}%"))
    if params.is_active is not None:
        query = query.filter(Users.is_active == params.is_active)

    total = query.with_entities(func.count(Users.id)).scalar()
    users = query.order_by(Users.name.asc()).offset(params.skip).limit(params.limit).all()
    return {"users": [UserOut.model_validate(u) for u in users], "total": total}


def get_user_by_id(db: Session, user_id: int) -> Optional[Users]:
    return db.query(Users).filter(Users.id == user_id).first()


def _get_user_or_404(db: Session, user_id: int) -> Users:
    user = get_user_by_id(db, user_id)
    if not user:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )
    return user


def _ensure_unique(db: Session, email: Optional[str], employee_id: Optional[str], exclude_id: Optional[int] = None):
    checks = (
        ("email", email, func.lower(Users.email)),
        ("employee_id", employee_id, func.lower(Users.employee_id)),
    )
    for field, value, column in checks:
        if not value:
            continue
        query = db.query(Users.id).filter(column == value.lower())
        if exclude_id is not None:
            query = query.filter(Users.id != exclude_id)
        if query.first():
            return error_response(
                message=f"User with {field.replace('_', ' ')} '{value}' already exists",
                status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
                http_status=409,
                field=field
            )


def user_role_lookup() -> List[Lookup]:
    return [Lookup(id=role.value, name=role.name.replace("_", " ").capitalize()) for role in UserRole]


def create_user(db: Session, payload: UserCreate, actor: UserToken) -> Users:
    ensure_role(actor, UserRole.ADMIN)
    data = enum_values(payload.model_dump())
    data["email"] = data["email"].lower()
    _ensure_unique(db, data["email"], data.get("employee_id"))

    user = Users(**data)
    db.add(user)
    commit_or_fail(db, "create user", on_conflict=dict(
        message=f"User with email '{data['email']}' already exists",
        status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
        http_status=409,
        field="email"
    ))
    db.refresh(user)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.create,
        entity_type="user",
        entity_id=user.id,
        actor=actor,
        new_values=audit_crud.model_snapshot(user),
        description=f"Created user {user.email}"
    )
    revalidate_paths("/dashboard/users")
    return user


def update_user(db: Session, user_id: int, payload: UserUpdate, actor: UserToken) -> Users:
    """Users may edit their own profile, managers anyone's; role and activity are admin only."""
    ensure_role(actor, UserRole.VIEWER)
    if actor.user_id != user_id:
        ensure_role(actor, UserRole.MANAGER)
    user = _get_user_or_404(db, user_id)

    update_data = enum_values(payload.model_dump(exclude_unset=True))
    if any(field in update_data for field in PRIVILEGED_USER_FIELDS):
        ensure_role(actor, UserRole.ADMIN)
    for field in ("name", "email", "role", "is_active"):
        if field in update_data and update_data[field] is None:
            return error_response(
                message=f"{field.replace('_', ' ').capitalize()} is required",
                status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR,
                http_status=400,
                field=field
            )
    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
    _ensure_unique(db, update_data.get("email"), update_data.get("employee_id"), exclude_id=user.id)

    old_values = audit_crud.model_snapshot(user)
    for field, value in update_data.items():
        setattr(user, field, value)
    commit_or_fail(db, "update user")
    db.refresh(user)
    new_values = audit_crud.model_snapshot(user)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.update,
        entity_type="user",
        entity_id=user.id,
        actor=actor,
        old_values=old_values,
        new_values=new_values,
        changed_fields=audit_crud.get_changed_fields(old_values, new_values),
        description=f"Updated user {user.email}"
    )
    revalidate_paths("/dashboard/users", f"/dashboard/users/{user.id}")
    return user


def _active_assignment_count(db: Session, user_id: int) -> int:
    return db.query(func.count(AssetAssignment.id)).filter(
        AssetAssignment.user_id == user_id,
        AssetAssignment.is_active == True
    ).scalar()


def deactivate_user(db: Session, user_id: int, actor: UserToken) -> Users:
    ensure_role(actor, UserRole.ADMIN)
    if actor.user_id == user_id:
        return error_response(
            message="You cannot deactivate your own account",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400
        )
    user = _get_user_or_404(db, user_id)

    active_count = _active_assignment_count(db, user.id)
    if active_count:
        return error_response(
            message=f"User still holds {active_count} active assignment(s)",
            status_code=AppStatusCode.INVALID_STATE_TRANSITION,
            http_status=409
        )

    old_values = audit_crud.model_snapshot(user)
    user.is_active = False
    commit_or_fail(db, "deactivate user")
    db.refresh(user)
    logger.info("User %s deactivated by %s", user.id, actor.user_id)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.delete,
        entity_type="user",
        entity_id=user.id,
        actor=actor,
        old_values=old_values,
        new_values=audit_crud.model_snapshot(user),
        changed_fields=["is_active"],
        description=f"Deactivated user {user.email}"
    )
    revalidate_paths("/dashboard/users", f"/dashboard/users/{user.id}")
    return user


def get_user_assets(db: Session, user_id: int, actor: UserToken) -> List[AssignmentOut]:
    """Active assignments of a user, newest first."""
    if actor.user_id != user_id and not has_role(actor, UserRole.MANAGER):
        return error_response(
            message="Insufficient permissions",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=403
        )
    _get_user_or_404(db, user_id)

    assignments = (
        db.query(AssetAssignment)
        .options(joinedload(AssetAssignment.asset))
        .filter(AssetAssignment.user_id == user_id, AssetAssignment.is_active == True)
        .order_by(AssetAssignment.assigned_at.desc())
        .all()
    )
    return [assignment_out(a) for a in assignments]
