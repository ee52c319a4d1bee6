# app/router/inventory/maintenance_router.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import error_response, success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.inventory import maintenance_crud as crud
from ...schemas.inventory.maintenance_schemas import (
    MaintenanceCreate, MaintenanceListResponse, MaintenanceOut, MaintenanceRequest, MaintenanceUpdate)

router = APIRouter(
    prefix="/api/maintenance",
    tags=["maintenance"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/all", response_model=MaintenanceListResponse)
def get_maintenance_records(
        params: MaintenanceRequest = Depends(),
        db: Session = Depends(get_db)):
    return crud.get_maintenance_records(db, params)


@router.get("/type-lookup", response_model=List[Lookup])
def type_lookup():
    return crud.maintenance_type_lookup()


@router.get("/priority-lookup", response_model=List[Lookup])
def priority_lookup():
    return crud.maintenance_priority_lookup()


@router.get("/{record_id}", response_model=MaintenanceOut)
def get_maintenance(record_id: int, db: Session = Depends(get_db)):
    record = crud.get_maintenance_by_id(db, record_id)
    if not record:
        return error_response(
            message="Maintenance record not found",
            status_code=AppStatusCode.RESOURCE_NOT_FOUND,
            http_status=404
        )
    return crud.maintenance_out(record)


@router.post("/", response_model=None)
def create_maintenance(
        record: MaintenanceCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.create_maintenance(db, record, current_user)
    return success_response(
        data=crud.maintenance_out(result),
        message="Maintenance record created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/{record_id}", response_model=None)
def update_maintenance(
        record_id: int,
        record: MaintenanceUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.update_maintenance(db, record_id, record, current_user)
    return success_response(
        data=crud.maintenance_out(result),
        message="Maintenance record updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY)
