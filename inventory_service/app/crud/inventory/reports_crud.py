# app/crud/inventory/reports_crud.py
from datetime import timedelta

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, joinedload

from shared.core.config import settings
from shared.core.schemas import ExportResponse
from shared.exporthelper import export_rows
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.datetime_utils import utc_now
from ...enum.inventory_enum import AssetStatus, ReportType
from ...models.inventory.asset_assignments import AssetAssignment
from ...models.inventory.assets import Asset
from ...schemas.inventory.reports_schemas import DashboardMetrics, WarrantyAlert
from .assignments_crud import is_overdue

ASSET_COLUMNS = {
    "asset_tag": "Asset Tag",
    "name": "Name",
    "category": "Category",
    "status": "Status",
    "condition": "Condition",
    "manufacturer": "Manufacturer",
    "model": "Model",
    "serial_number": "Serial Number",
    "purchase_date": "Purchase Date",
    "purchase_price": "Purchase Price",
    "warranty_expiry": "Warranty Expiry",
    "building": "Building",
    "room": "Room",
}

ASSIGNMENT_COLUMNS = {
    "asset_tag": "Asset Tag",
    "asset_name": "Asset Name",
    "user_name": "Assigned To",
    "user_email": "Email",
    "status": "Status",
    "assigned_at": "Assigned At",
    "expected_return_at": "Expected Return",
    "returned_at": "Returned At",
    "is_overdue": "Overdue",
    "purpose": "Purpose",
}

WARRANTY_COLUMNS = {
    "asset_tag": "Asset Tag",
    "name": "Name",
    "category": "Category",
    "manufacturer": "Manufacturer",
    "warranty_expiry": "Warranty Expiry",
    "days_remaining": "Days Remaining",
}


def _warranty_window():
    now = utc_now()
    return now, now + timedelta(days=settings.WARRANTY_ALERT_DAYS)


def _expiring_warranty_query(db: Session):
    start, end = _warranty_window()
    return db.query(Asset).filter(
        Asset.is_deleted == False,
        Asset.warranty_expiry.isnot(None),
        Asset.warranty_expiry >= start,
        Asset.warranty_expiry <= end
    ).order_by(Asset.warranty_expiry.asc())


def get_dashboard_metrics(db: Session) -> DashboardMetrics:
    live = Asset.is_deleted == False
    now = utc_now()

    total_assets = db.query(func.count(Asset.id)).filter(live).scalar() or 0

    by_status = dict(
        db.query(Asset.status, func.count(Asset.id))
        .filter(live)
        .group_by(Asset.status)
        .all()
    )
    by_category = dict(
        db.query(Asset.category, func.count(Asset.id))
        .filter(live)
        .group_by(Asset.category)
        .all()
    )

    assigned = by_status.get(AssetStatus.assigned.value, 0)
    available = by_status.get(AssetStatus.available.value, 0)
    utilization_rate = round(assigned * 100 / total_assets) if total_assets else 0

    active_assignments = db.query(func.count(AssetAssignment.id)).filter(
        AssetAssignment.is_active == True).scalar() or 0
    overdue_assignments = db.query(func.count(AssetAssignment.id)).filter(
        and_(
            AssetAssignment.is_active == True,
            AssetAssignment.expected_return_at.isnot(None),
            AssetAssignment.expected_return_at < now
        )
    ).scalar() or 0

    return DashboardMetrics(
        total_assets=total_assets,
        assets_by_status=by_status,
        assets_by_category=by_category,
        assigned_assets=assigned,
        available_assets=available,
        utilization_rate=utilization_rate,
        active_assignments=active_assignments,
        overdue_assignments=overdue_assignments,
        warranty_expiring=[
            WarrantyAlert.model_validate(a) for a in _expiring_warranty_query(db).all()]
    )


def _asset_rows(db: Session):
    assets = db.query(Asset).filter(Asset.is_deleted == False).order_by(Asset.asset_tag).all()
    return [{key: getattr(a, key) for key in ASSET_COLUMNS} for a in assets]


def _assignment_rows(db: Session):
    now = utc_now()
    assignments = (
        db.query(AssetAssignment)
        .options(joinedload(AssetAssignment.asset), joinedload(AssetAssignment.user))
        .order_by(AssetAssignment.assigned_at.desc())
        .all()
    )
    return [
        {
            "asset_tag": a.asset.asset_tag if a.asset else None,
            "asset_name": a.asset.name if a.asset else None,
            "user_name": a.user.name if a.user else None,
            "user_email": a.user.email if a.user else None,
            "status": a.status,
            "assigned_at": a.assigned_at,
            "expected_return_at": a.expected_return_at,
            "returned_at": a.returned_at,
            "is_overdue": "Yes" if is_overdue(a, now) else "No",
            "purpose": a.purpose,
        }
        for a in assignments
    ]


def _warranty_rows(db: Session):
    now = utc_now()
    return [
        {
            "asset_tag": a.asset_tag,
            "name": a.name,
            "category": a.category,
            "manufacturer": a.manufacturer,
            "warranty_expiry": a.warranty_expiry,
            "days_remaining": (a.warranty_expiry - now).days,
        }
        for a in _expiring_warranty_query(db).all()
    ]


def export_report(db: Session, report_type: str) -> ExportResponse:
    try:
        report_type = ReportType(report_type)
    except ValueError:
        return error_response(
            message=f"Unknown report type '{report_type}'",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="type"
        )

    stamp = utc_now().strftime("%Y%m%d")
    if report_type == ReportType.assets:
        return export_rows(_asset_rows(db), f"assets_{stamp}.csv", ASSET_COLUMNS)
    if report_type == ReportType.assignments:
        return export_rows(_assignment_rows(db), f"assignments_{stamp}.csv", ASSIGNMENT_COLUMNS)
    return export_rows(_warranty_rows(db), f"warranty_{stamp}.csv", WARRANTY_COLUMNS)


def report_columns(report_type: str):
    columns = {
        ReportType.assets: ASSET_COLUMNS,
        ReportType.assignments: ASSIGNMENT_COLUMNS,
        ReportType.warranty: WARRANTY_COLUMNS,
    }[ReportType(report_type)]
    return list(columns.values())
