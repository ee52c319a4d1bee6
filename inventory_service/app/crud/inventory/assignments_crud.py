# app/crud/inventory/assignments_crud.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, not_, or_
from sqlalchemy.orm import Session, joinedload

from shared.core.auth import ensure_role, has_role
from shared.core.config import settings
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import error_response
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.datetime_utils import utc_now
from shared.utils.enums import UserRole
from . import audit_crud
from ...enum.inventory_enum import AssetStatus, AssignmentStatus, AuditAction
from ...helpers.crud_helper import commit_or_fail, enum_values
from ...helpers.revalidation import revalidate_paths
from ...models.inventory.asset_assignments import AssetAssignment
from ...models.inventory.assets import Asset
from ...schemas.inventory.assignments_schemas import (
    AssignmentCreate, AssignmentListResponse, AssignmentOut, AssignmentReturn,
    AssignmentsRequest, AssignmentUpdate)

logger = logging.getLogger(__name__)

ALREADY_ASSIGNED_CONFLICT = dict(
    message="Asset is already assigned",
    status_code=AppStatusCode.ASSET_ALREADY_ASSIGNED,
    http_status=409,
    field="asset_id"
)


# ----------------------------------------------------------------------
# READS
# ----------------------------------------------------------------------

def is_overdue(assignment: AssetAssignment, now: Optional[datetime] = None) -> bool:
    """Overdue is computed, never persisted by a schedule."""
    now = now or utc_now()
    return bool(
        assignment.is_active
        and assignment.expected_return_at is not None
        and assignment.expected_return_at < now
    )


def assignment_out(assignment: AssetAssignment, now: Optional[datetime] = None) -> AssignmentOut:
    now = now or utc_now()
    asset = assignment.asset
    user = assignment.user
    end = assignment.returned_at or now
    duration_days = (end - assignment.assigned_at).days if assignment.assigned_at else None

    return AssignmentOut.model_validate({
        **{c.name: getattr(assignment, c.name) for c in assignment.__table__.columns},
        "is_overdue": is_overdue(assignment, now),
        "duration_days": duration_days,
        "asset_tag": asset.asset_tag if asset else None,
        "asset_name": asset.name if asset else None,
        "user_name": user.name if user else None,
        "user_email": user.email if user else None,
    })


def _overdue_clause(now: datetime):
    return and_(
        AssetAssignment.is_active == True,
        AssetAssignment.expected_return_at.isnot(None),
        AssetAssignment.expected_return_at < now
    )


def build_assignment_filters(params: AssignmentsRequest, now: datetime):
    filters = []

    if params.user_id:
        filters.append(AssetAssignment.user_id == params.user_id)
    if params.asset_id:
        filters.append(AssetAssignment.asset_id == params.asset_id)
    if params.status and params.status.lower() != "all":
        filters.append(AssetAssignment.status == params.status.lower())
    if params.is_active is not None:
        filters.append(AssetAssignment.is_active == params.is_active)
    if params.is_overdue is True:
        filters.append(_overdue_clause(now))
    elif params.is_overdue is False:
        filters.append(not_(_overdue_clause(now)))
    if params.assigned_from:
        filters.append(AssetAssignment.assigned_at >= params.assigned_from)
    if params.assigned_to:
        filters.append(AssetAssignment.assigned_at <= params.assigned_to)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(
            Asset.asset_tag.ilike(search_term),
            Asset.name.ilike(search_term),
            Users.name.ilike(search_term),
            Users.email.ilike(search_term),
            AssetAssignment.purpose.ilike(search_term)
        ))

    return filters


def _restrict_to_own(params: AssignmentsRequest, actor: UserToken):
    """Below manager a user only ever sees their own assignments."""
    if has_role(actor, UserRole.MANAGER):
        return params
    if params.user_id and params.user_id != actor.user_id:
        return error_response(
            message="Insufficient permissions",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=403,
            field="user_id"
        )
    params.user_id = actor.user_id
    return params


def get_assignments(db: Session, params: AssignmentsRequest, actor: UserToken) -> AssignmentListResponse:
    params = _restrict_to_own(params, actor)
    now = utc_now()

    base_query = (
        db.query(AssetAssignment)
        .join(Asset, AssetAssignment.asset_id == Asset.id)
        .join(Users, AssetAssignment.user_id == Users.id)
        .filter(*build_assignment_filters(params, now))
    )
    total = base_query.with_entities(func.count(AssetAssignment.id)).scalar()

    results = (
        base_query
        .options(joinedload(AssetAssignment.asset), joinedload(AssetAssignment.user))
        .order_by(AssetAssignment.assigned_at.desc(), AssetAssignment.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    return {"assignments": [assignment_out(a, now) for a in results], "total": total}


def _get_assignment_or_404(db: Session, assignment_id: int) -> AssetAssignment:
    assignment = db.query(AssetAssignment).filter(
        AssetAssignment.id == assignment_id).first()
    if not assignment:
        return error_response(
            message="Assignment not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )
    return assignment


def get_assignment_by_id(db: Session, assignment_id: int, actor: UserToken) -> AssignmentOut:
    assignment = _get_assignment_or_404(db, assignment_id)
    if not has_role(actor, UserRole.MANAGER) and assignment.user_id != actor.user_id:
        return error_response(
            message="Insufficient permissions",
            status_code=AppStatusCode.UNAUTHORIZED_ACTION,
            http_status=403
        )
    return assignment_out(assignment)


def get_asset_assignment_history(db: Session, asset_id: int) -> List[AssignmentOut]:
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        return error_response(
            message="Asset not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )

    now = utc_now()
    history = (
        db.query(AssetAssignment)
        .filter(AssetAssignment.asset_id == asset_id)
        .order_by(AssetAssignment.assigned_at.desc(), AssetAssignment.id.desc())
        .all()
    )
    return [assignment_out(a, now) for a in history]


def assignment_status_lookup() -> List[Lookup]:
    return [Lookup(id=status.value, name=status.name.capitalize()) for status in AssignmentStatus]


# ----------------------------------------------------------------------
# CREATE
# ----------------------------------------------------------------------

def create_assignment(db: Session, payload: AssignmentCreate, actor: UserToken) -> AssetAssignment:
    ensure_role(actor, UserRole.MANAGER)

    asset = db.query(Asset).filter(Asset.id == payload.asset_id).first()
    if not asset or asset.is_deleted:
        return error_response(
            message="Asset not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404,
            field="asset_id"
        )

    if asset.status != AssetStatus.available.value:
        if asset.status == AssetStatus.assigned.value:
            return error_response(
                message=f"Asset is already assigned (current status: {asset.status})",
                status_code=AppStatusCode.ASSET_ALREADY_ASSIGNED,
                http_status=409,
                field="asset_id"
            )
        return error_response(
            message=f"Asset is not available for assignment (current status: {asset.status})",
            status_code=AppStatusCode.INVALID_STATE_TRANSITION,
            http_status=409,
            field="asset_id"
        )

    user = db.query(Users).filter(Users.id == payload.user_id).first()
    if not user:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404,
            field="user_id"
        )
    if not user.is_active:
        return error_response(
            message="User is not active",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="user_id"
        )

    existing = db.query(AssetAssignment.id).filter(
        AssetAssignment.asset_id == asset.id,
        AssetAssignment.is_active == True
    ).first()
    if existing:
        return error_response(**ALREADY_ASSIGNED_CONFLICT)

    active_count = db.query(func.count(AssetAssignment.id)).filter(
        AssetAssignment.user_id == user.id,
        AssetAssignment.is_active == True
    ).scalar()
    if active_count >= settings.MAX_ACTIVE_ASSIGNMENTS_PER_USER:
        return error_response(
            message=f"User already has {active_count} active assignments "
                    f"(maximum {settings.MAX_ACTIVE_ASSIGNMENTS_PER_USER})",
            status_code=AppStatusCode.ASSIGNMENT_LIMIT_REACHED,
            http_status=409,
            field="user_id"
        )

    now = utc_now()
    if payload.expected_return_at is not None and payload.expected_return_at <= now:
        return error_response(
            message="Expected return date must be in the future",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="expected_return_at"
        )

    db_assignment = AssetAssignment(
        **payload.model_dump(),
        status=AssignmentStatus.active.value,
        is_active=True,
        assigned_at=now,
        assigned_by=actor.user_id
    )
    db.add(db_assignment)
    asset.status = AssetStatus.assigned.value
    # Assignment insert and asset flip land in the same commit
    commit_or_fail(db, "create assignment", on_conflict=ALREADY_ASSIGNED_CONFLICT)
    db.refresh(db_assignment)
    logger.info("Asset %s assigned to user %s by %s",
                asset.asset_tag, user.id, actor.user_id)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.create,
        entity_type="assignment",
        entity_id=db_assignment.id,
        actor=actor,
        new_values=audit_crud.model_snapshot(db_assignment),
        description=f"Assigned asset {asset.asset_tag} to {user.name}"
    )
    revalidate_paths(
        "/dashboard/assignments",
        "/dashboard/assets",
        f"/dashboard/assets/{asset.id}",
        f"/dashboard/users/{user.id}",
        "/dashboard"
    )
    return db_assignment


# ----------------------------------------------------------------------
# STATE CHANGES
# ----------------------------------------------------------------------

def _close_as_returned(
    assignment: AssetAssignment,
    actor: UserToken,
    returned_at: Optional[datetime] = None,
    condition: Optional[str] = None,
    return_notes: Optional[str] = None,
):
    returned_at = returned_at or utc_now()
    if assignment.assigned_at and returned_at < assignment.assigned_at:
        return error_response(
            message="Return date cannot be before the assignment date",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="returned_at"
        )

    assignment.status = AssignmentStatus.returned.value
    assignment.returned_at = returned_at
    assignment.actual_return_condition = condition
    assignment.return_notes = return_notes
    assignment.returned_by = actor.user_id
    assignment.is_active = False
    if assignment.asset is not None:
        assignment.asset.status = AssetStatus.available.value


def apply_return(
    db: Session,
    assignment: AssetAssignment,
    actor: UserToken,
    returned_at: Optional[datetime] = None,
    condition: Optional[str] = None,
    return_notes: Optional[str] = None,
) -> AssetAssignment:
    """Close an active assignment and free its asset in one commit."""
    if not assignment.is_active:
        return error_response(
            message="Assignment is not active",
            status_code=AppStatusCode.INVALID_STATE_TRANSITION,
            http_status=409
        )
    _close_as_returned(assignment, actor, returned_at, condition, return_notes)
    commit_or_fail(db, "return assignment")
    db.refresh(assignment)
    return assignment


def apply_assignment_update(
    db: Session,
    assignment: AssetAssignment,
    update_data: Dict[str, Any],
    actor: UserToken,
) -> AssetAssignment:
    """Validate and commit a partial edit. No audit, no revalidation."""
    update_data = dict(update_data)
    new_status = update_data.pop("status", None)
    returned_at = update_data.pop("returned_at", None)
    condition = update_data.pop("actual_return_condition", None)
    return_notes = update_data.pop("return_notes", None)

    expected_return_at = update_data.get("expected_return_at")
    if expected_return_at is not None and assignment.assigned_at and expected_return_at <= assignment.assigned_at:
        return error_response(
            message="Expected return date must be after the assignment date",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=400,
            field="expected_return_at"
        )

    status_changes = new_status is not None and new_status != assignment.status
    if status_changes and not assignment.is_active:
        return error_response(
            message=f"Assignment is closed (status: {assignment.status})",
            status_code=AppStatusCode.INVALID_STATE_TRANSITION,
            http_status=409,
            field="status"
        )

    for field, value in update_data.items():
        setattr(assignment, field, value)

    if status_changes:
        if new_status == AssignmentStatus.returned.value:
            _close_as_returned(assignment, actor, returned_at, condition, return_notes)
        elif new_status == AssignmentStatus.lost.value:
            assignment.status = new_status
            assignment.is_active = False
            if assignment.asset is not None:
                assignment.asset.status = AssetStatus.lost.value
        else:
            # active <-> overdue, the assignment stays open
            assignment.status = new_status

    commit_or_fail(db, "update assignment")
    db.refresh(assignment)
    return assignment


def update_assignment(db: Session, assignment_id: int, payload: AssignmentUpdate, actor: UserToken) -> AssetAssignment:
    ensure_role(actor, UserRole.MANAGER)
    assignment = _get_assignment_or_404(db, assignment_id)

    old_values = audit_crud.model_snapshot(assignment)
    apply_assignment_update(
        db, assignment, enum_values(payload.model_dump(exclude_unset=True)), actor)
    new_values = audit_crud.model_snapshot(assignment)

    audit_crud.log_audit_trail(
        db,
        action=AuditAction.update,
        entity_type="assignment",
        entity_id=assignment.id,
        actor=actor,
        old_values=old_values,
        new_values=new_values,
        changed_fields=audit_crud.get_changed_fields(old_values, new_values),
        description=f"Updated assignment {assignment.id}"
    )
    revalidate_paths(
        "/dashboard/assignments",
        f"/dashboard/assignments/{assignment.id}",
        "/dashboard/assets",
        f"/dashboard/assets/{assignment.asset_id}",
        f"/dashboard/users/{assignment.user_id}"
    )
    return assignment


def return_assignment(db: Session, assignment_id: int, payload: AssignmentReturn, actor: UserToken) -> AssetAssignment:
    ensure_role(actor, UserRole.MANAGER)
    assignment = _get_assignment_or_404(db, assignment_id)

    asset = assignment.asset
    user = assignment.user
    old_values = audit_crud.model_snapshot(assignment)
    apply_return(
        db,
        assignment,
        actor,
        returned_at=payload.returned_at,
        condition=getattr(payload.actual_return_condition, "value", payload.actual_return_condition),
        return_notes=payload.return_notes
    )
    logger.info("Assignment %s returned by %s", assignment.id, actor.user_id)

    asset_label = asset.asset_tag if asset else f"#{assignment.asset_id}"
    user_label = user.name if user else f"#{assignment.user_id}"
    audit_crud.log_audit_trail(
        db,
        action=AuditAction.return_,
        entity_type="assignment",
        entity_id=assignment.id,
        actor=actor,
        old_values=old_values,
        new_values=audit_crud.model_snapshot(assignment),
        description=f"Returned asset {asset_label} from {user_label}"
    )
    revalidate_paths(
        "/dashboard/assignments",
        f"/dashboard/assignments/{assignment.id}",
        "/dashboard/assets",
        f"/dashboard/assets/{assignment.asset_id}",
        f"/dashboard/users/{assignment.user_id}",
        "/dashboard"
    )
    return assignment
