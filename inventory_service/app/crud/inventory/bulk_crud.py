# app/crud/inventory/bulk_crud.py
import logging
from typing import Any, Callable, Dict, List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from shared.core.auth import ensure_role
from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_message, error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.datetime_utils import utc_now
from shared.utils.enums import UserRole
from . import assets_crud, assignments_crud, audit_crud
from ...enum.inventory_enum import AuditAction, BulkAssetOperation, BulkAssignmentOperation
from ...helpers.crud_helper import enum_values
from ...helpers.revalidation import revalidate_paths
from ...models.inventory.asset_assignments import AssetAssignment
from ...models.inventory.assets import Asset
from ...schemas.inventory.bulk_schemas import (
    BulkAssetRequest, BulkAssignmentRequest, BulkItemError, BulkOperationResult)

logger = logging.getLogger(__name__)

LOCATION_FIELDS = ("building", "floor", "room", "desk", "location_notes")
# Per-asset identity, never the same value across many rows
NON_BULK_ASSET_FIELDS = ("asset_tag", "serial_number")


def _validate_ids(ids: List[int], limit: int) -> List[int]:
    """Input order, first occurrence wins."""
    if not ids:
        return error_response(
            message="At least one id is required",
            status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR,
            http_status=400,
            field="ids"
        )
    if len(ids) > limit:
        return error_response(
            message=f"A bulk operation accepts at most {limit} items",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="ids"
        )
    return list(dict.fromkeys(ids))


def _missing_data(field: str, message: str):
    return error_response(
        message=message,
        status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR,
        http_status=400,
        field=field
    )


def _ensure_all_found(ids: List[int], rows: Dict[int, Any], label: str):
    missing = [item_id for item_id in ids if item_id not in rows]
    if missing:
        return error_response(
            message=f"{label} not found: {', '.join(str(i) for i in missing)}",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404,
            field="ids"
        )


def _run_items(db: Session, operation: str, ids: List[int], rows: Dict[int, Any],
               apply: Callable[[Any], Any]) -> BulkOperationResult:
    """Apply one item at a time; a failing item is rolled back and recorded."""
    errors: List[BulkItemError] = []
    successful = 0

    for item_id in ids:
        try:
            apply(rows[item_id])
            successful += 1
        except HTTPException as exc:
            db.rollback()
            errors.append(BulkItemError(id=item_id, error=error_message(exc)))
        except Exception as exc:
            db.rollback()
            logger.exception("Bulk %s failed for item %s", operation, item_id)
            errors.append(BulkItemError(id=item_id, error=str(exc) or exc.__class__.__name__))

    return BulkOperationResult(
        success=True,
        operation=operation,
        total_items=len(ids),
        processed_items=len(ids),
        successful_items=successful,
        failed_items=len(errors),
        errors=errors
    )


def _summarize(db: Session, action: AuditAction, entity_type: str, actor: UserToken,
               result: BulkOperationResult, ids: List[int], data: Dict[str, Any]):
    audit_crud.log_audit_trail(
        db,
        action=action,
        entity_type=entity_type,
        entity_id="bulk",
        actor=actor,
        new_values={
            "operation": result.operation,
            "ids": ids,
            "data": data,
            "successful_items": result.successful_items,
            "failed_items": result.failed_items,
        },
        description=(
            f"Bulk {result.operation} on {result.total_items} {entity_type}s: "
            f"{result.successful_items} succeeded, {result.failed_items} failed"
        )
    )


# ----------------------------------------------------------------------
# ASSETS
# ----------------------------------------------------------------------

def _asset_bulk_data(payload: BulkAssetRequest) -> Dict[str, Any]:
    operation = payload.operation
    data = enum_values(payload.data.model_dump(exclude_unset=True)) if payload.data else {}

    if operation == BulkAssetOperation.delete:
        return {}

    if operation == BulkAssetOperation.status_change:
        if not data.get("status"):
            return _missing_data("status", "Status is required for a status change")
        return {"status": data["status"]}

    if operation == BulkAssetOperation.category_change:
        if not data.get("category"):
            return _missing_data("category", "Category is required for a category change")
        return {"category": data["category"]}

    if operation == BulkAssetOperation.location_change:
        location = {key: data[key] for key in LOCATION_FIELDS if key in data}
        if not location:
            return _missing_data("building", "At least one location field is required")
        return location

    for field in NON_BULK_ASSET_FIELDS:
        if field in data:
            return error_response(
                message=f"{field.replace('_', ' ').capitalize()} cannot be changed in bulk",
                status_code=AppStatusCode.INVALID_INPUT,
                http_status=400,
                field=field
            )
    if not data:
        return _missing_data("data", "No fields to update")
    return data


def bulk_asset_operations(db: Session, payload: BulkAssetRequest, actor: UserToken) -> BulkOperationResult:
    operation = payload.operation
    ensure_role(actor, UserRole.ADMIN if operation == BulkAssetOperation.delete else UserRole.MANAGER)

    ids = _validate_ids(payload.ids, settings.BULK_ASSET_LIMIT)
    update_data = _asset_bulk_data(payload)

    assets = db.query(Asset).filter(Asset.id.in_(ids), Asset.is_deleted == False).all()
    rows = {asset.id: asset for asset in assets}
    _ensure_all_found(ids, rows, "Assets")

    if operation == BulkAssetOperation.delete:
        def apply(asset):
            return assets_crud.apply_soft_delete(db, asset)
    else:
        def apply(asset):
            return assets_crud.apply_asset_update(db, asset, dict(update_data))

    result = _run_items(db, operation.value, ids, rows, apply)
    logger.info("Bulk asset %s by user %s: %s/%s succeeded", operation.value,
                actor.user_id, result.successful_items, result.total_items)

    _summarize(
        db,
        AuditAction.delete if operation == BulkAssetOperation.delete else AuditAction.update,
        "asset", actor, result, ids, update_data)
    revalidate_paths("/dashboard/assets", "/dashboard")
    return result


# ----------------------------------------------------------------------
# ASSIGNMENTS
# ----------------------------------------------------------------------

def _assignment_bulk_data(payload: BulkAssignmentRequest) -> Dict[str, Any]:
    operation = payload.operation
    data = enum_values(payload.data.model_dump(exclude_unset=True)) if payload.data else {}

    if operation == BulkAssignmentOperation.return_:
        return {key: data.get(key) for key in ("returned_at", "actual_return_condition", "return_notes")}

    if operation == BulkAssignmentOperation.status_change:
        if not data.get("status"):
            return _missing_data("status", "Status is required for a status change")
        return {"status": data["status"]}

    expected_return_at = data.get("expected_return_at")
    if not expected_return_at:
        return _missing_data("expected_return_at", "A new expected return date is required")
    if expected_return_at <= utc_now():
        return error_response(
            message="Expected return date must be in the future",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="expected_return_at"
        )
    return {"expected_return_at": expected_return_at}


def _extend_return_date(db: Session, assignment: AssetAssignment, data: Dict[str, Any], actor: UserToken):
    if not assignment.is_active:
        return error_response(
            message="Assignment is not active",
            status_code=AppStatusCode.INVALID_STATE_TRANSITION,
            http_status=409
        )
    return assignments_crud.apply_assignment_update(db, assignment, data, actor)


def bulk_assignment_operations(db: Session, payload: BulkAssignmentRequest, actor: UserToken) -> BulkOperationResult:
    operation = payload.operation
    ensure_role(actor, UserRole.MANAGER)

    ids = _validate_ids(payload.ids, settings.BULK_ASSIGNMENT_LIMIT)
    data = _assignment_bulk_data(payload)

    assignments = db.query(AssetAssignment).filter(AssetAssignment.id.in_(ids)).all()
    rows = {assignment.id: assignment for assignment in assignments}
    _ensure_all_found(ids, rows, "Assignments")

    if operation == BulkAssignmentOperation.return_:
        def apply(assignment):
            return assignments_crud.apply_return(
                db, assignment, actor,
                returned_at=data["returned_at"],
                condition=data["actual_return_condition"],
                return_notes=data["return_notes"])
    elif operation == BulkAssignmentOperation.status_change:
        def apply(assignment):
            return assignments_crud.apply_assignment_update(db, assignment, data, actor)
    else:
        def apply(assignment):
            return _extend_return_date(db, assignment, data, actor)

    result = _run_items(db, operation.value, ids, rows, apply)
    logger.info("Bulk assignment %s by user %s: %s/%s succeeded", operation.value,
                actor.user_id, result.successful_items, result.total_items)

    _summarize(
        db,
        AuditAction.return_ if operation == BulkAssignmentOperation.return_ else AuditAction.update,
        "assignment", actor, result, ids, data)
    revalidate_paths("/dashboard/assignments", "/dashboard/assets", "/dashboard")
    return result
