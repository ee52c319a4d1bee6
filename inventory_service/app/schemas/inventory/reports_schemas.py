# app/schemas/inventory/reports_schemas.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime


class WarrantyAlert(BaseModel):
    id: int
    asset_tag: str
    name: str
    category: str
    warranty_expiry: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DashboardMetrics(BaseModel):
    total_assets: int
    assets_by_status: Dict[str, int]
    assets_by_category: Dict[str, int]
    assigned_assets: int
    available_assets: int
    utilization_rate: int
    active_assignments: int
    overdue_assignments: int
    warranty_expiring: List[WarrantyAlert]
