# app/crud/inventory/assets_crud.py
import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.auth import ensure_role
from shared.core.config import settings
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole
from . import audit_crud
from ...enum.inventory_enum import (
    AssetCategory, AssetCondition, AssetStatus, AuditAction, CATEGORY_TAG_PREFIXES)
from ...helpers.crud_helper import commit_or_fail, enum_values
from ...helpers.revalidation import revalidate_paths
from ...models.inventory.asset_assignments import AssetAssignment
from ...models.inventory.asset_counters import AssetCounter
from ...models.inventory.assets import Asset
from ...models.inventory.maintenance_records import MaintenanceRecord
from ...schemas.inventory.assets_schemas import (
    AssetCreate, AssetOut, AssetsRequest, AssetsResponse, AssetUpdate, NextTagOut)

logger = logging.getLogger(__name__)

ASSET_TAG_PATTERN = re.compile(r"^IT-[A-Z]{2,3}-\d{4}$")
REQUIRED_ASSET_FIELDS = ("name", "category", "status", "condition", "asset_tag")


# ----------------------------------------------------------------------
# TAGS
# ----------------------------------------------------------------------

def tag_prefix(category: str) -> str:
    return CATEGORY_TAG_PREFIXES[AssetCategory(category)]


def format_asset_tag(category: str, number: int) -> str:
    return f"IT-{tag_prefix(category)}-{number:04d}"


def normalize_asset_tag(asset_tag: str) -> str:
    """Upper-case and validate a caller supplied tag."""
    normalized = asset_tag.strip().upper()
    if not ASSET_TAG_PATTERN.match(normalized):
        return error_response(
            message="Asset tag must look like IT-XXX-0000",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="asset_tag"
        )
    return normalized


def _tag_taken(db: Session, asset_tag: str, exclude_id: Optional[int] = None, live_only: bool = True) -> bool:
    query = db.query(Asset.id).filter(func.upper(Asset.asset_tag) == asset_tag)
    if live_only:
        query = query.filter(Asset.is_deleted == False)
    if exclude_id is not None:
        query = query.filter(Asset.id != exclude_id)
    return query.first() is not None


def _first_free_number(db: Session, category: str, start: int) -> int:
    number = start
    while _tag_taken(db, format_asset_tag(category, number), live_only=False):
        number += 1
    return number


def next_asset_tag(db: Session, category: AssetCategory) -> NextTagOut:
    """Preview the tag the next create in this category would get."""
    category = getattr(category, "value", category)
    counter = db.query(AssetCounter).filter(
        AssetCounter.category == category).first()
    number = _first_free_number(db, category, counter.next_number if counter else 1)
    return NextTagOut(
        asset_tag=format_asset_tag(category, number),
        category=category,
        prefix=tag_prefix(category),
        next_number=number
    )


def _reserve_asset_tag(db: Session, category: str) -> str:
    # Committed together with the asset insert
    counter = (
        db.query(AssetCounter)
        .filter(AssetCounter.category == category)
        .with_for_update()
        .first()
    )
    if not counter:
        counter = AssetCounter(category=category, next_number=1)
        db.add(counter)

    number = _first_free_number(db, category, counter.next_number)
    counter.next_number = number + 1
    return format_asset_tag(category, number)


# ----------------------------------------------------------------------
# READS
# ----------------------------------------------------------------------

def build_asset_filters(params: AssetsRequest):
    filters = [Asset.is_deleted == False]

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(
            Asset.asset_tag.ilike(search_term),
            Asset.name.ilike(search_term),
            Asset.serial_number.ilike(search_term),
            Asset.model.ilike(search_term)
        ))

    if params.category and params.category.lower() != "all":
        filters.append(Asset.category == params.category.lower())

    if params.status and params.status.lower() != "all":
        filters.append(Asset.status == params.status.lower())

    if params.condition and params.condition.lower() != "all":
        filters.append(Asset.condition == params.condition.lower())

    if params.building:
        filters.append(Asset.building.ilike(f"%{params.building}%"))

    if params.manufacturer:
        filters.append(Asset.manufacturer.ilike(f"%{params.manufacturer}%"))

    if params.is_assigned is True:
        filters.append(Asset.status == AssetStatus.assigned.value)
    elif params.is_assigned is False:
        filters.append(Asset.status != AssetStatus.assigned.value)

    return filters


def get_assets(db: Session, params: AssetsRequest) -> AssetsResponse:
    base_query = db.query(Asset).filter(*build_asset_filters(params))
    total = base_query.with_entities(func.count(Asset.id)).scalar()

    results = (
        base_query
        .order_by(Asset.updated_at.desc(), Asset.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    return {"assets": [AssetOut.model_validate(a) for a in results], "total": total}


def get_asset_by_id(db: Session, asset_id: int) -> Optional[Asset]:
    return db.query(Asset).filter(
        Asset.id == asset_id,
        Asset.is_deleted == False
    ).first()


def get_live_asset_or_404(db: Session, asset_id: int) -> Asset:
    asset = get_asset_by_id(db, asset_id)
    if not asset:
        return error_response(
            message="Asset not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )
    return asset


def asset_status_lookup() -> List[Lookup]:
    return [Lookup(id=status.value, name=status.name.capitalize()) for status in AssetStatus]


def asset_category_lookup() -> List[Lookup]:
    return [
        Lookup(id=category.value, name=category.name.replace("_", " ").capitalize())
        for category in AssetCategory
    ]


def asset_condition_lookup() -> List[Lookup]:
    return [Lookup(id=condition.value, name=condition.name.capitalize()) for condition in AssetCondition]


# ----------------------------------------------------------------------
# WRITES
# ----------------------------------------------------------------------

def _ensure_unique_serial(db: Session, serial_number: Optional[str], exclude_id: Optional[int] = None):
    if not serial_number:
        return
    query = db.query(Asset.id).filter(
        Asset.is_deleted == False,
        func.lower(Asset.serial_number) == serial_number.lower()
    )
    if exclude_id is not None:
        query = query.filter(Asset.id != exclude_id)
    if query.first():
        return error_response(
            message=f"Asset with serial number '{serial_number}' already exists",
            status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
            http_status=409,
            field="serial_number"
        )


def _duplicate_tag_conflict(asset_tag: str) -> Dict[str, Any]:
    return dict(
        message=f"Asset with tag '{asset_tag}' already exists",
        status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
        http_status=409,
        field="asset_tag"
    )


def _tag_reservation_conflict(category: str) -> Dict[str, Any]:
    return dict(
        message=f"Could not reserve an asset tag for category '{category}', please retry",
        status_code=AppStatusCode.OPERATION_ERROR,
        http_status=409,
        field="asset_tag"
    )


def _reject_assigned_status(current: Optional[str], new: str):
    """Only assignment operations may move an asset into or out of 'assigned'."""
    assigned = AssetStatus.assigned.value
    if new != current and assigned in (current, new):
        return error_response(
            message="Asset status 'assigned' is managed through assignments",
            status_code=AppStatusCode.INVALID_STATE_TRANSITION,
            http_status=400,
            field="status"
        )


def create_asset(db: Session, payload: AssetCreate, actor: UserToken) -> Asset:
    ensure_role(actor, UserRole.MANAGER)

    data = enum_values(payload.model_dump(exclude={"asset_tag"}))
    _reject_assigned_status(None, data["status"])
    _ensure_unique_serial(db, data.get("serial_number"))

    if payload.asset_tag:
        asset_tag = normalize_asset_tag(payload.asset_tag)
        if _tag_taken(db, asset_tag):
            return error_response(**_duplicate_tag_conflict(asset_tag))
        on_conflict = _duplicate_tag_conflict(asset_tag)
    else:
        asset_tag = _reserve_asset_tag(db, data["category"])
        on_conflict = _tag_reservation_conflict(data["category"])

    db_asset = Asset(**data, asset_tag=asset_tag, created_by=actor.user_id)
    db.add(db_asset)
    commit_or_fail(db, "create asset", on_conflict=on_conflict)
    db.refresh(db_asset)
    logger.info("Asset %s created by user %s", db_asset.asset_tag, actor.user_id)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.create,
        entity_type="asset",
        entity_id=db_asset.id,
        actor=actor,
        new_values=audit_crud.model_snapshot(db_asset),
        description=f"Created asset {db_asset.asset_tag} ({db_asset.name})"
    )
    revalidate_paths("/dashboard/assets", "/dashboard")
    return db_asset


def apply_asset_update(db: Session, db_asset: Asset, update_data: Dict[str, Any]) -> Asset:
    """Validate and commit a partial update. No audit, no revalidation."""
    for field in REQUIRED_ASSET_FIELDS:
        if field in update_data and update_data[field] is None:
            return error_response(
                message=f"{field.replace('_', ' ').capitalize()} is required",
                status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR,
                http_status=400,
                field=field
            )

    if "asset_tag" in update_data:
        asset_tag = normalize_asset_tag(update_data["asset_tag"])
        if _tag_taken(db, asset_tag, exclude_id=db_asset.id):
            return error_response(**_duplicate_tag_conflict(asset_tag))
        update_data["asset_tag"] = asset_tag

    if "serial_number" in update_data:
        _ensure_unique_serial(db, update_data["serial_number"], exclude_id=db_asset.id)

    if "status" in update_data:
        _reject_assigned_status(db_asset.status, update_data["status"])

    for field, value in update_data.items():
        setattr(db_asset, field, value)

    commit_or_fail(
        db, "update asset",
        on_conflict=_duplicate_tag_conflict(update_data.get("asset_tag", db_asset.asset_tag)))
    db.refresh(db_asset)
    return db_asset


def update_asset(db: Session, asset_id: int, payload: AssetUpdate, actor: UserToken) -> Asset:
    ensure_role(actor, UserRole.MANAGER)
    db_asset = get_live_asset_or_404(db, asset_id)

    update_data = enum_values(payload.model_dump(exclude_unset=True))
    old_values = audit_crud.model_snapshot(db_asset)
    apply_asset_update(db, db_asset, update_data)
    new_values = audit_crud.model_snapshot(db_asset)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.update,
        entity_type="asset",
        entity_id=db_asset.id,
        actor=actor,
        old_values=old_values,
        new_values=new_values,
        changed_fields=audit_crud.get_changed_fields(old_values, new_values),
        description=f"Updated asset {db_asset.asset_tag}"
    )
    revalidate_paths("/dashboard/assets", f"/dashboard/assets/{db_asset.id}")
    return db_asset


def apply_soft_delete(db: Session, db_asset: Asset) -> Asset:
    """Guards and commit of a soft delete. No audit, no revalidation."""
    active_assignment = db.query(AssetAssignment.id).filter(
        AssetAssignment.asset_id == db_asset.id,
        AssetAssignment.is_active == True
    ).first()
    if active_assignment:
        return error_response(
            message="Asset is currently assigned and must be returned first",
            status_code=AppStatusCode.ASSET_DELETE_BLOCKED,
            http_status=409
        )

    if settings.STRICT_ASSET_DELETE:
        has_history = db.query(MaintenanceRecord.id).filter(
            MaintenanceRecord.asset_id == db_asset.id).first()
        if has_history:
            return error_response(
                message="Asset has maintenance history and cannot be deleted",
                status_code=AppStatusCode.ASSET_DELETE_BLOCKED,
                http_status=409
            )

    db_asset.is_deleted = True
    commit_or_fail(db, "delete asset")
    db.refresh(db_asset)
    return db_asset


def delete_asset(db: Session, asset_id: int, actor: UserToken) -> Asset:
    """Soft delete; related assignments and maintenance rows stay as they are."""
    ensure_role(actor, UserRole.ADMIN)
    db_asset = get_live_asset_or_404(db, asset_id)

    old_values = audit_crud.model_snapshot(db_asset)
    apply_soft_delete(db, db_asset)
    logger.info("Asset %s deleted by user %s", db_asset.asset_tag, actor.user_id)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.delete,
        entity_type="asset",
        entity_id=db_asset.id,
        actor=actor,
        old_values=old_values,
        description=f"Deleted asset {db_asset.asset_tag} ({db_asset.name})"
    )
    revalidate_paths("/dashboard/assets", "/dashboard")
    return db_asset
