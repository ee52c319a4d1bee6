# app/router/inventory/reports_router.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from shared.core.auth import ensure_role, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from shared.exporthelper import to_csv
from shared.utils.enums import UserRole
from ...crud.inventory import reports_crud as crud
from ...schemas.inventory.reports_schemas import DashboardMetrics

router = APIRouter(
    prefix="/api/reports",
    tags=["reports"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/dashboard", response_model=DashboardMetrics)
def dashboard(db: Session = Depends(get_db)):
    return crud.get_dashboard_metrics(db)


@router.get("/export")
def export_report(
        type: str = Query(...),
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    ensure_role(current_user, UserRole.MANAGER)
    export = crud.export_report(db, type)
    return Response(
        content=to_csv(export, crud.report_columns(type)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )
