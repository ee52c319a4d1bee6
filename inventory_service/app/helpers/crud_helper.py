# app/helpers/crud_helper.py
import logging
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def enum_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Replace enum members by their stored string value."""
    return {key: (value.value if isinstance(value, Enum) else value) for key, value in data.items()}


def commit_or_fail(db: Session, action: str, on_conflict: Optional[Dict[str, Any]] = None):
    """
    Commit the primary write. Constraint violations are reported with
    ``on_conflict`` (error_response kwargs) when given, anything else
    surfaces as OPERATION_FAILED.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if on_conflict:
            return error_response(**on_conflict)
        logger.exception("Integrity error while trying to %s", action)
        return error_response(
            message=f"Failed to {action}",
            status_code=AppStatusCode.OPERATION_FAILED,
            http_status=500
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        return error_response(
            message=f"Failed to {action}",
            status_code=AppStatusCode.OPERATION_FAILED,
            http_status=500
        )
