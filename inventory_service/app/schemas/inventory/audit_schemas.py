# app/schemas/inventory/audit_schemas.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from shared.core.schemas import CommonQueryParams


class AuditLogOut(BaseModel):
    id: int
    action: str
    entity_type: str
    entity_id: str
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    old_values: Optional[str] = None
    new_values: Optional[str] = None
    changed_fields: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuditLogRequest(CommonQueryParams):
    action: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    user_id: Optional[int] = None


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogOut]
    total: int
