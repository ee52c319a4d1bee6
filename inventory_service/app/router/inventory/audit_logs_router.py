# app/router/inventory/audit_logs_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ...crud.inventory import audit_crud as crud
from ...schemas.inventory.audit_schemas import AuditLogListResponse, AuditLogRequest

router = APIRouter(
    prefix="/api/audit-logs",
    tags=["audit logs"]
)


@router.get("/all", response_model=AuditLogListResponse)
def get_audit_logs(
        params: AuditLogRequest = Depends(),
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(allow_admin)):
    return crud.get_audit_logs(db, params, current_user)
