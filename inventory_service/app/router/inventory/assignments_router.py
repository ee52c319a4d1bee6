# app/router/inventory/assignments_router.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.inventory import assignments_crud as crud
from ...crud.inventory import bulk_crud
from ...schemas.inventory.assignments_schemas import (
    AssignmentCreate, AssignmentListResponse, AssignmentOut, AssignmentReturn,
    AssignmentsRequest, AssignmentUpdate)
from ...schemas.inventory.bulk_schemas import BulkAssignmentRequest

router = APIRouter(
    prefix="/api/assignments",
    tags=["assignments"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/all", response_model=AssignmentListResponse)
def get_assignments(
        params: AssignmentsRequest = Depends(),
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.get_assignments(db, params, current_user)


@router.get("/status-lookup", response_model=List[Lookup])
def status_lookup():
    return crud.assignment_status_lookup()


@router.post("/bulk", response_model=None)
def bulk_assignments(
        payload: BulkAssignmentRequest,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = bulk_crud.bulk_assignment_operations(db, payload, current_user)
    return success_response(data=result, message=f"Bulk {payload.operation.value} processed")


@router.get("/{assignment_id}", response_model=AssignmentOut)
def get_assignment(
        assignment_id: int,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.get_assignment_by_id(db, assignment_id, current_user)


@router.post("/", response_model=None)
def create_assignment(
        assignment: AssignmentCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.create_assignment(db, assignment, current_user)
    return success_response(
        data=crud.assignment_out(result),
        message="Asset assigned successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/{assignment_id}", response_model=None)
def update_assignment(
        assignment_id: int,
        assignment: AssignmentUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.update_assignment(db, assignment_id, assignment, current_user)
    return success_response(
        data=crud.assignment_out(result),
        message="Assignment updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.post("/{assignment_id}/return", response_model=None)
def return_assignment(
        assignment_id: int,
        details: AssignmentReturn,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.return_assignment(db, assignment_id, details, current_user)
    return success_response(
        data=crud.assignment_out(result),
        message="Asset returned successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY)
