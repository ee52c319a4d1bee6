# app/router/inventory/users_router.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import error_response, success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.inventory import users_crud as crud
from ...schemas.inventory.assignments_schemas import AssignmentOut
from ...schemas.inventory.users_schemas import UserCreate, UserListResponse, UserOut, UsersRequest, UserUpdate

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/all", response_model=UserListResponse)
def get_users(
        params: UsersRequest = Depends(),
        db: Session = Depends(get_db)):
    return crud.get_users(db, params)


@router.get("/me", response_model=UserOut)
def get_me(
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.get_user_by_id(db, current_user.user_id)


@router.get("/role-lookup", response_model=List[Lookup])
def role_lookup():
    return crud.user_role_lookup()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = crud.get_user_by_id(db, user_id)
    if not user:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )
    return user


@router.get("/{user_id}/assets", response_model=List[AssignmentOut])
def get_user_assets(
        user_id: int,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.get_user_assets(db, user_id, current_user)


@router.post("/", response_model=None)
def create_user(
        user: UserCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(allow_admin)):
    result = crud.create_user(db, user, current_user)
    return success_response(
        data=UserOut.model_validate(result),
        message="User created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/{user_id}", response_model=None)
def update_user(
        user_id: int,
        user: UserUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.update_user(db, user_id, user, current_user)
    return success_response(
        data=UserOut.model_validate(result),
        message="User updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.delete("/{user_id}", response_model=None)
def deactivate_user(
        user_id: int,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(allow_admin)):
    result = crud.deactivate_user(db, user_id, current_user)
    return success_response(
        data=UserOut.model_validate(result),
        message="User deactivated successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY)
