# app/router/inventory/assets_router.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.inventory import assets_crud as crud
from ...crud.inventory import assignments_crud, bulk_crud
from ...enum.inventory_enum import AssetCategory
from ...schemas.inventory.assets_schemas import (
    AssetCreate, AssetOut, AssetsRequest, AssetsResponse, AssetUpdate, NextTagOut)
from ...schemas.inventory.assignments_schemas import AssignmentOut
from ...schemas.inventory.bulk_schemas import BulkAssetRequest

router = APIRouter(
    prefix="/api/assets",
    tags=["assets"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/all", response_model=AssetsResponse)
def get_assets(
        params: AssetsRequest = Depends(),
        db: Session = Depends(get_db)):
    return crud.get_assets(db, params)


@router.get("/next-tag", response_model=NextTagOut)
def next_tag(
        category: AssetCategory = Query(...),
        db: Session = Depends(get_db)):
    return crud.next_asset_tag(db, category)


@router.get("/status-lookup", response_model=List[Lookup])
def status_lookup():
    return crud.asset_status_lookup()


@router.get("/category-lookup", response_model=List[Lookup])
def category_lookup():
    return crud.asset_category_lookup()


@router.get("/condition-lookup", response_model=List[Lookup])
def condition_lookup():
    return crud.asset_condition_lookup()


@router.post("/bulk", response_model=None)
def bulk_assets(
        payload: BulkAssetRequest,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = bulk_crud.bulk_asset_operations(db, payload, current_user)
    return success_response(data=result, message=f"Bulk {payload.operation.value} processed")


@router.get("/{asset_id}", response_model=AssetOut)
def get_asset(asset_id: int, db: Session = Depends(get_db)):
    return crud.get_live_asset_or_404(db, asset_id)


@router.get("/{asset_id}/assignments", response_model=List[AssignmentOut])
def asset_assignment_history(asset_id: int, db: Session = Depends(get_db)):
    return assignments_crud.get_asset_assignment_history(db, asset_id)


@router.post("/", response_model=None)
def create_asset(
        asset: AssetCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.create_asset(db, asset, current_user)
    return success_response(
        data=AssetOut.model_validate(result),
        message="Asset created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/{asset_id}", response_model=None)
def update_asset(
        asset_id: int,
        asset: AssetUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.update_asset(db, asset_id, asset, current_user)
    return success_response(
        data=AssetOut.model_validate(result),
        message="Asset updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.delete("/{asset_id}", response_model=None)
def delete_asset(
        asset_id: int,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = crud.delete_asset(db, asset_id, current_user)
    return success_response(
        data=AssetOut.model_validate(result),
        message="Asset deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY)
