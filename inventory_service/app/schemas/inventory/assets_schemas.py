# app/schemas/inventory/assets_schemas.py
from pydantic import BaseModel, Field
from typing import Any, List, Optional, Dict
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.inventory_enum import AssetCategory, AssetCondition, AssetStatus


class AssetBase(EmptyStringModel):
    subcategory: Optional[str] = Field(default=None, max_length=100)
    serial_number: Optional[str] = Field(default=None, max_length=255)
    model: Optional[str] = Field(default=None, max_length=255)
    manufacturer: Optional[str] = Field(default=None, max_length=255)
    specifications: Optional[Dict[str, Any]] = None
    purchase_date: Optional[datetime] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    current_value: Optional[float] = Field(default=None, ge=0)
    depreciation_rate: Optional[float] = Field(default=None, ge=0, le=100)
    warranty_expiry: Optional[datetime] = None
    building: Optional[str] = Field(default=None, max_length=100)
    floor: Optional[str] = Field(default=None, max_length=20)
    room: Optional[str] = Field(default=None, max_length=50)
    desk: Optional[str] = Field(default=None, max_length=50)
    location_notes: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class AssetCreate(AssetBase):
    # Generated from the category counter when omitted
    asset_tag: Optional[str] = Field(default=None, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    category: AssetCategory
    status: AssetStatus = AssetStatus.available
    condition: AssetCondition = AssetCondition.good


class AssetUpdate(AssetBase):
    """Partial update: omitted fields keep their value, blank fields are nulled."""
    asset_tag: Optional[str] = Field(default=None, max_length=50)
    name: Optional[str] = Field(default=None, max_length=255)
    category: Optional[AssetCategory] = None
    status: Optional[AssetStatus] = None
    condition: Optional[AssetCondition] = None


class AssetOut(BaseModel):
    id: int
    asset_tag: str
    name: str
    category: str
    subcategory: Optional[str] = None
    status: str
    condition: str
    serial_number: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    purchase_date: Optional[datetime] = None
    purchase_price: Optional[float] = None
    current_value: Optional[float] = None
    depreciation_rate: Optional[float] = None
    warranty_expiry: Optional[datetime] = None
    building: Optional[str] = None
    floor: Optional[str] = None
    room: Optional[str] = None
    desk: Optional[str] = None
    location_notes: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    is_deleted: bool = False
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssetsRequest(CommonQueryParams):
    category: Optional[str] = None
    status: Optional[str] = None
    condition: Optional[str] = None
    building: Optional[str] = None
    manufacturer: Optional[str] = None
    is_assigned: Optional[bool] = None


class AssetsResponse(BaseModel):
    assets: List[AssetOut]
    total: int

    model_config = {"from_attributes": True}


class NextTagOut(BaseModel):
    asset_tag: str
    category: str
    prefix: str
    next_number: int
