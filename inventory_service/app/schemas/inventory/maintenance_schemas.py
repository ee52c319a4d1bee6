# app/schemas/inventory/maintenance_schemas.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.inventory_enum import AssetCondition, MaintenancePriority, MaintenanceType


class MaintenanceCreate(EmptyStringModel):
    asset_id: int = Field(gt=0)
    type: MaintenanceType
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    priority: MaintenancePriority = MaintenancePriority.medium
    performed_by: Optional[str] = Field(default=None, max_length=255)
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    next_scheduled_at: Optional[datetime] = None
    is_completed: bool = False
    condition_before: Optional[AssetCondition] = None
    condition_after: Optional[AssetCondition] = None
    attachments: Optional[Dict[str, Any]] = None


class MaintenanceUpdate(EmptyStringModel):
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    priority: Optional[MaintenancePriority] = None
    performed_by: Optional[str] = Field(default=None, max_length=255)
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    next_scheduled_at: Optional[datetime] = None
    is_completed: Optional[bool] = None
    condition_after: Optional[AssetCondition] = None


class MaintenanceOut(BaseModel):
    id: int
    asset_id: int
    type: str
    title: str
    description: str
    priority: Optional[str] = None
    performed_by: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    next_scheduled_at: Optional[datetime] = None
    is_completed: bool
    condition_before: Optional[str] = None
    condition_after: Optional[str] = None
    attachments: Optional[Dict[str, Any]] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    asset_tag: Optional[str] = None
    asset_name: Optional[str] = None

    model_config = {"from_attributes": True}


class MaintenanceRequest(CommonQueryParams):
    asset_id: Optional[int] = None
    type: Optional[str] = None
    is_completed: Optional[bool] = None


class MaintenanceListResponse(BaseModel):
    records: List[MaintenanceOut]
    total: int
