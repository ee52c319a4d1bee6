# app/crud/inventory/maintenance_crud.py
import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from shared.core.auth import ensure_role
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.datetime_utils import utc_now
from shared.utils.enums import UserRole
from . import audit_crud
from ...enum.inventory_enum import AuditAction, MaintenancePriority, MaintenanceType
from ...helpers.crud_helper import commit_or_fail, enum_values
from ...helpers.revalidation import revalidate_paths
from ...models.inventory.assets import Asset
from ...models.inventory.maintenance_records import MaintenanceRecord
from ...schemas.inventory.maintenance_schemas import (
    MaintenanceCreate, MaintenanceListResponse, MaintenanceOut, MaintenanceRequest, MaintenanceUpdate)

logger = logging.getLogger(__name__)


def maintenance_out(record: MaintenanceRecord) -> MaintenanceOut:
    asset = record.asset
    return MaintenanceOut.model_validate({
        **{c.name: getattr(record, c.name) for c in record.__table__.columns},
        "asset_tag": asset.asset_tag if asset else None,
        "asset_name": asset.name if asset else None,
    })


def _check_dates(started_at, completed_at):
    if started_at and completed_at and completed_at < started_at:
        return error_response(
            message="Completion date cannot be before the start date",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="completed_at"
        )


def _finish(record: MaintenanceRecord):
    """Completed work stamps the record and carries the resulting condition to the asset."""
    if not record.is_completed:
        return
    if record.completed_at is None:
        record.completed_at = utc_now()
    if record.condition_after and record.asset is not None:
        record.asset.condition = record.condition_after


def get_maintenance_records(db: Session, params: MaintenanceRequest) -> MaintenanceListResponse:
    query = db.query(MaintenanceRecord).join(Asset, MaintenanceRecord.asset_id == Asset.id)

    if params.asset_id:
        query = query.filter(MaintenanceRecord.asset_id == params.asset_id)
    if params.type and params.type.lower() != "all":
        query = query.filter(MaintenanceRecord.type == params.type.lower())
    if params.is_completed is not None:
        query = query.filter(MaintenanceRecord.is_completed == params.is_completed)
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(
            MaintenanceRecord.title.ilike(search_term),
            MaintenanceRecord.description.ilike(search_term),
            Asset.asset_tag.ilike(search_term),
            Asset.name.ilike(search_term)
        ))

    total = query.with_entities(func.count(MaintenanceRecord.id)).scalar()
    records = (
        query
        .options(joinedload(MaintenanceRecord.asset))
        .order_by(MaintenanceRecord.created_at.desc(), MaintenanceRecord.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return {"records": [maintenance_out(r) for r in records], "total": total}


def get_maintenance_by_id(db: Session, record_id: int) -> Optional[MaintenanceRecord]:
    return db.query(MaintenanceRecord).filter(MaintenanceRecord.id == record_id).first()


def _get_record_or_404(db: Session, record_id: int) -> MaintenanceRecord:
    record = get_maintenance_by_id(db, record_id)
    if not record:
        return error_response(
            message="Maintenance record not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )
    return record


def create_maintenance(db: Session, payload: MaintenanceCreate, actor: UserToken) -> MaintenanceRecord:
    ensure_role(actor, UserRole.MANAGER)

    asset = db.query(Asset).filter(
        Asset.id == payload.asset_id,
        Asset.is_deleted == False
    ).first()
    if not asset:
        return error_response(
            message="Asset not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404,
            field="asset_id"
        )
    _check_dates(payload.started_at, payload.completed_at)

    data = enum_values(payload.model_dump())
    if not data.get("condition_before"):
        data["condition_before"] = asset.condition

    record = MaintenanceRecord(**data, created_by=actor.user_id)
    record.asset = asset
    db.add(record)
    _finish(record)
    commit_or_fail(db, "create maintenance record")
    db.refresh(record)
    logger.info("Maintenance %s logged for asset %s", record.id, asset.asset_tag)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.maintenance,
        entity_type="maintenance",
        entity_id=record.id,
        actor=actor,
        new_values=audit_crud.model_snapshot(record),
        description=f"{record.type.capitalize()} maintenance on {asset.asset_tag}: {record.title}"
    )
    revalidate_paths("/dashboard/maintenance", f"/dashboard/assets/{asset.id}")
    return record


def update_maintenance(db: Session, record_id: int, payload: MaintenanceUpdate, actor: UserToken) -> MaintenanceRecord:
    ensure_role(actor, UserRole.MANAGER)
    record = _get_record_or_404(db, record_id)

    update_data = enum_values(payload.model_dump(exclude_unset=True))
    for field in ("title", "description", "is_completed"):
        if field in update_data and update_data[field] is None:
            return error_response(
                message=f"{field.replace('_', ' ').capitalize()} is required",
                status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR,
                http_status=400,
                field=field
            )
    _check_dates(
        update_data.get("started_at", record.started_at),
        update_data.get("completed_at", record.completed_at))

    old_values = audit_crud.model_snapshot(record)
    for field, value in update_data.items():
        setattr(record, field, value)
    _finish(record)
    commit_or_fail(db, "update maintenance record")
    db.refresh(record)
    new_values = audit_crud.model_snapshot(record)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.update,
        entity_type="maintenance",
        entity_id=record.id,
        actor=actor,
        old_values=old_values,
        new_values=new_values,
        changed_fields=audit_crud.get_changed_fields(old_values, new_values),
        description=f"Updated maintenance record {record.id}"
    )
    revalidate_paths("/dashboard/maintenance", f"/dashboard/maintenance/{record.id}")
    return record


def maintenance_type_lookup() -> List[Lookup]:
    return [Lookup(id=t.value, name=t.name.capitalize()) for t in MaintenanceType]


def maintenance_priority_lookup() -> List[Lookup]:
    return [Lookup(id=p.value, name=p.name.capitalize()) for p in MaintenancePriority]
