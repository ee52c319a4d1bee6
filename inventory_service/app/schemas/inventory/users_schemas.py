# app/schemas/inventory/users_schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.utils.enums import UserRole
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class UserCreate(EmptyStringModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    department: Optional[str] = Field(default=None, max_length=100)
    job_title: Optional[str] = Field(default=None, max_length=100)
    employee_id: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    role: UserRole = UserRole.USER
    is_active: bool = True


class UserUpdate(EmptyStringModel):
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(default=None, max_length=100)
    job_title: Optional[str] = Field(default=None, max_length=100)
    employee_id: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None
    job_title: Optional[str] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UsersRequest(CommonQueryParams):
    role: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None


class UserListResponse(BaseModel):
    users: List[UserOut]
    total: int
