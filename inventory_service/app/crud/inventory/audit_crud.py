# app/crud/inventory/audit_crud.py
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.auth import ensure_role
from shared.core.schemas import UserToken
from shared.utils.enums import UserRole
from ...models.inventory.audit_logs import AuditLog
from ...schemas.inventory.audit_schemas import AuditLogListResponse, AuditLogOut, AuditLogRequest

logger = logging.getLogger(__name__)

# Bookkeeping columns never count as a change
IGNORED_CHANGE_FIELDS = {"updated_at"}


def model_snapshot(obj) -> Dict[str, Any]:
    """Column name -> value of an ORM row."""
    if obj is None:
        return {}
    return {column.name: getattr(obj, column.name) for column in obj.__table__.columns}


def get_changed_fields(old_values: Optional[Dict[str, Any]], new_values: Optional[Dict[str, Any]]) -> List[str]:
    old_values = old_values or {}
    new_values = new_values or {}
    return [
        key for key, value in new_values.items()
        if key not in IGNORED_CHANGE_FIELDS and old_values.get(key) != value
    ]


def _serialize(values) -> Optional[str]:
    if values is None:
        return None
    return json.dumps(values, default=str)


def _persist_audit_entry(db: Session, entry: AuditLog):
    db.add(entry)
    db.commit()


def log_audit_trail(
    db: Session,
    action: str,
    entity_type: str,
    entity_id,
    actor: Optional[UserToken] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    changed_fields: Optional[List[str]] = None,
    description: Optional[str] = None,
) -> bool:
    """
    Append one audit row. Runs after the primary commit and swallows every
    failure, so the caller's write always stands. Returns whether the row
    was written.
    """
    try:
        entry = AuditLog(
            action=getattr(action, "value", action),
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=actor.user_id if actor else None,
            user_email=actor.email if actor else None,
            old_values=_serialize(old_values),
            new_values=_serialize(new_values),
            changed_fields=_serialize(changed_fields),
            description=description,
        )
        _persist_audit_entry(db, entry)
        return True
    except Exception:
        logger.exception("Failed to write audit entry %s %s/%s",
                         action, entity_type, entity_id)
        try:
            db.rollback()
        except Exception:
            logger.exception("Rollback after audit failure also failed")
        return False


def get_audit_logs(db: Session, params: AuditLogRequest, actor: UserToken) -> AuditLogListResponse:
    ensure_role(actor, UserRole.ADMIN)

    query = db.query(AuditLog)
    if params.action:
        query = query.filter(AuditLog.action == params.action)
    if params.entity_type:
        query = query.filter(AuditLog.entity_type == params.entity_type)
    if params.entity_id:
        query = query.filter(AuditLog.entity_id == params.entity_id)
    if params.user_id:
        query = query.filter(AuditLog.user_id == params.user_id)
    if params.search:
        query = query.filter(AuditLog.description.ilike(f"%{params.search}%"))

    total = query.with_entities(func.count(AuditLog.id)).scalar()
    logs = (
        query
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return {
        "logs": [AuditLogOut.model_validate(log) for log in logs],
        "total": total,
    }
