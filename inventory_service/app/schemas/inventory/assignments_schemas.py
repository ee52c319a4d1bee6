# app/schemas/inventory/assignments_schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.inventory_enum import AssetCondition, AssignmentStatus


class AssignmentCreate(EmptyStringModel):
    asset_id: int = Field(gt=0)
    user_id: int = Field(gt=0)
    purpose: Optional[str] = Field(default=None, max_length=255)
    # None means the assignment is open-ended
    expected_return_at: Optional[datetime] = None
    notes: Optional[str] = None
    building: Optional[str] = Field(default=None, max_length=100)
    floor: Optional[str] = Field(default=None, max_length=20)
    room: Optional[str] = Field(default=None, max_length=50)
    desk: Optional[str] = Field(default=None, max_length=50)
    location_notes: Optional[str] = None


class AssignmentUpdate(EmptyStringModel):
    purpose: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None
    expected_return_at: Optional[datetime] = None
    status: Optional[AssignmentStatus] = None
    # Only used when status moves to returned
    returned_at: Optional[datetime] = None
    actual_return_condition: Optional[AssetCondition] = None
    return_notes: Optional[str] = None


class AssignmentReturn(EmptyStringModel):
    returned_at: Optional[datetime] = None
    actual_return_condition: Optional[AssetCondition] = None
    return_notes: Optional[str] = None


class AssignmentOut(BaseModel):
    id: int
    asset_id: int
    user_id: int
    status: str
    assigned_at: Optional[datetime] = None
    expected_return_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    actual_return_condition: Optional[str] = None
    purpose: Optional[str] = None
    notes: Optional[str] = None
    return_notes: Optional[str] = None
    assigned_by: Optional[int] = None
    returned_by: Optional[int] = None
    building: Optional[str] = None
    floor: Optional[str] = None
    room: Optional[str] = None
    desk: Optional[str] = None
    location_notes: Optional[str] = None
    is_active: bool
    is_overdue: bool = False
    duration_days: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    asset_tag: Optional[str] = None
    asset_name: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None

    model_config = {"from_attributes": True}


class AssignmentsRequest(CommonQueryParams):
    user_id: Optional[int] = None
    asset_id: Optional[int] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None
    is_overdue: Optional[bool] = None
    assigned_from: Optional[datetime] = None
    assigned_to: Optional[datetime] = None


class AssignmentListResponse(BaseModel):
    assignments: List[AssignmentOut]
    total: int

    model_config = {"from_attributes": True}
