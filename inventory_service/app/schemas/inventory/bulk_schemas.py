# app/schemas/inventory/bulk_schemas.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.inventory_enum import AssetCondition, AssignmentStatus, BulkAssetOperation, BulkAssignmentOperation
from .assets_schemas import AssetUpdate


class BulkAssetRequest(EmptyStringModel):
    operation: BulkAssetOperation
    ids: List[int]
    data: Optional[AssetUpdate] = None


class BulkAssignmentData(EmptyStringModel):
    status: Optional[AssignmentStatus] = None
    expected_return_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    actual_return_condition: Optional[AssetCondition] = None
    return_notes: Optional[str] = None


class BulkAssignmentRequest(EmptyStringModel):
    operation: BulkAssignmentOperation
    ids: List[int]
    data: Optional[BulkAssignmentData] = None


class BulkItemError(BaseModel):
    id: int
    error: str


class BulkOperationResult(BaseModel):
    # success reports the dispatch; per-item outcome is in the counters
    success: bool
    operation: str
    total_items: int
    processed_items: int
    successful_items: int
    failed_items: int
    errors: List[BulkItemError] = []
