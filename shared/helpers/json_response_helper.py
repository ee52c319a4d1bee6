# shared/helpers/json_response_helper.py
from fastapi import HTTPException
from typing import Any, Optional

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def success_response(data: Any, message: str = "Success", status_code: str = AppStatusCode.DATA_RETRIEVED_SUCCESSFULLY):
    return JsonOutResult(
        data=data,
        status="Success",
        status_code=status_code,
        message=message
    )


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400, field: Optional[str] = None):
    """
    Raise the tagged failure envelope. ``status_code`` is the error kind,
    ``field`` the offending input field when there is one.
    """
    raise HTTPException(
        status_code=http_status,
        detail=JsonOutResult(
            data=None,
            status="Failure",
            status_code=status_code,
            message=message,
            field=field
        ).model_dump()
    )


def error_message(exc: HTTPException) -> str:
    """Human message carried by an HTTPException raised through error_response."""
    if isinstance(exc.detail, dict):
        return str(exc.detail.get("message") or exc.detail)
    return str(exc.detail)
