from datetime import timedelta

import pytest
from fastapi import HTTPException

from shared.core.config import settings
from shared.utils.app_status_code import AppStatusCode
from shared.utils.datetime_utils import utc_now
from inventory_service.app.crud.inventory import bulk_crud
from inventory_service.app.models.inventory.asset_assignments import AssetAssignment
from inventory_service.app.models.inventory.assets import Asset
from inventory_service.app.models.inventory.audit_logs import AuditLog
from inventory_service.app.schemas.inventory.bulk_schemas import BulkAssetRequest, BulkAssignmentRequest


def reload(db, model, row_id):
    db.expire_all()
    return db.get(model, row_id)


def test_bulk_delete_skips_assigned_asset(db, make_asset, assign, employee, admin):
    first, second, third = make_asset(), make_asset(), make_asset()
    assign(second, employee)

    result = bulk_crud.bulk_asset_operations(
        db, BulkAssetRequest(operation="delete", ids=[first.id, second.id, third.id]), admin)

    assert result.success is True
    assert result.total_items == 3
    assert result.processed_items == 3
    assert result.successful_items == 2
    assert result.failed_items == 1
    assert [e.id for e in result.errors] == [second.id]
    assert "returned first" in result.errors[0].error
    assert reload(db, Asset, first.id).is_deleted is True
    assert reload(db, Asset, second.id).is_deleted is False
    assert reload(db, Asset, third.id).is_deleted is True


def test_bulk_keeps_going_after_failures(db, make_asset, make_user, assign, admin):
    assets = [make_asset(name=f"Asset {n}") for n in range(5)]
    blocked = [assets[0], assets[3]]
    for asset in blocked:
        assign(asset, make_user())

    result = bulk_crud.bulk_asset_operations(
        db, BulkAssetRequest(operation="delete", ids=[a.id for a in assets]), admin)

    assert result.successful_items == 3
    assert result.failed_items == 2
    assert len(result.errors) == 2
    for asset in assets:
        assert reload(db, Asset, asset.id).is_deleted is (asset not in blocked)


def test_unknown_id_fails_before_processing(db, make_asset, admin):
    asset = make_asset()

    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="delete", ids=[asset.id, 999]), admin)

    assert exc.value.status_code == 404
    assert "999" in exc.value.detail["message"]
    assert reload(db, Asset, asset.id).is_deleted is False


def test_deleted_asset_counts_as_unknown(db, make_asset, admin, manager):
    gone, kept = make_asset(), make_asset()
    bulk_crud.bulk_asset_operations(db, BulkAssetRequest(operation="delete", ids=[gone.id]), admin)

    with pytest.raises(HTTPException):
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="status_change", ids=[gone.id, kept.id],
                                 data={"status": "retired"}), manager)
    assert reload(db, Asset, kept.id).status == "available"


def test_id_list_bounds(db, make_asset, manager, monkeypatch):
    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="status_change", ids=[], data={"status": "retired"}), manager)
    assert exc.value.detail["field"] == "ids"

    monkeypatch.setattr(settings, "BULK_ASSET_LIMIT", 2)
    ids = [make_asset().id for _ in range(3)]
    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="status_change", ids=ids, data={"status": "retired"}), manager)
    assert exc.value.detail["field"] == "ids"


def test_duplicate_ids_are_processed_once(db, make_asset, manager):
    first, second = make_asset(), make_asset()

    result = bulk_crud.bulk_asset_operations(
        db, BulkAssetRequest(operation="status_change", ids=[first.id, first.id, second.id],
                             data={"status": "retired"}), manager)

    assert result.total_items == 2
    assert result.successful_items == 2


def test_bulk_delete_needs_admin(db, make_asset, manager):
    asset = make_asset()
    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="delete", ids=[asset.id]), manager)
    assert exc.value.detail["status_code"] == AppStatusCode.UNAUTHORIZED_ACTION


def test_status_change_respects_assignment_coupling(db, make_asset, assign, employee, manager):
    free, taken = make_asset(), make_asset()
    assign(taken, employee)

    result = bulk_crud.bulk_asset_operations(
        db, BulkAssetRequest(operation="status_change", ids=[free.id, taken.id],
                             data={"status": "maintenance"}), manager)

    assert result.successful_items == 1
    assert [e.id for e in result.errors] == [taken.id]
    assert reload(db, Asset, free.id).status == "maintenance"
    assert reload(db, Asset, taken.id).status == "assigned"


def test_status_change_requires_a_status(db, make_asset, manager):
    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="status_change", ids=[make_asset().id]), manager)
    assert exc.value.detail["field"] == "status"


def test_category_and_location_change(db, make_asset, manager):
    asset = make_asset(building="HQ", room="101")

    bulk_crud.bulk_asset_operations(
        db, BulkAssetRequest(operation="category_change", ids=[asset.id],
                             data={"category": "tablet"}), manager)
    bulk_crud.bulk_asset_operations(
        db, BulkAssetRequest(operation="location_change", ids=[asset.id],
                             data={"building": "Annex", "floor": "2"}), manager)

    moved = reload(db, Asset, asset.id)
    assert moved.category == "tablet"
    assert moved.building == "Annex"
    assert moved.floor == "2"
    assert moved.room == "101"


def test_bulk_update_refuses_identity_fields(db, make_asset, manager):
    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_asset_operations(
            db, BulkAssetRequest(operation="update", ids=[make_asset().id],
                                 data={"asset_tag": "IT-LAP-0099"}), manager)
    assert exc.value.detail["field"] == "asset_tag"


def test_one_summary_audit_entry_per_run(db, make_asset, admin):
    ids = [make_asset().id for _ in range(3)]
    before = db.query(AuditLog).count()

    bulk_crud.bulk_asset_operations(db, BulkAssetRequest(operation="delete", ids=ids), admin)

    entries = db.query(AuditLog).order_by(AuditLog.id).all()[before:]
    assert len(entries) == 1
    assert entries[0].entity_id == "bulk"
    assert entries[0].action == "delete"
    assert "3 succeeded" in entries[0].description


def test_bulk_return(db, make_asset, make_user, assign, manager):
    assets = [make_asset(), make_asset(), make_asset()]
    assignments = [assign(asset, make_user()) for asset in assets]
    bulk_crud.bulk_assignment_operations(
        db, BulkAssignmentRequest(operation="return", ids=[assignments[1].id]), manager)

    result = bulk_crud.bulk_assignment_operations(
        db, BulkAssignmentRequest(operation="return", ids=[a.id for a in assignments],
                                  data={"actual_return_condition": "fair"}), manager)

    assert result.successful_items == 2
    assert result.failed_items == 1
    assert result.errors[0].id == assignments[1].id
    for assignment, asset in zip(assignments, assets):
        assert reload(db, AssetAssignment, assignment.id).is_active is False
        assert reload(db, Asset, asset.id).status == "available"
    assert reload(db, AssetAssignment, assignments[0].id).actual_return_condition == "fair"


def test_bulk_extend_return_date(db, make_asset, assign, employee, manager):
    assignment = assign(make_asset(), employee, days=1)
    new_date = utc_now() + timedelta(days=30)

    result = bulk_crud.bulk_assignment_operations(
        db, BulkAssignmentRequest(operation="extend_return_date", ids=[assignment.id],
                                  data={"expected_return_at": new_date}), manager)

    assert result.successful_items == 1
    extended = reload(db, AssetAssignment, assignment.id).expected_return_at
    assert abs((extended - new_date).total_seconds()) < 1


def test_bulk_extend_rejects_past_date(db, make_asset, assign, employee, manager):
    assignment = assign(make_asset(), employee)

    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_assignment_operations(
            db, BulkAssignmentRequest(operation="extend_return_date", ids=[assignment.id],
                                      data={"expected_return_at": utc_now() - timedelta(days=1)}),
            manager)
    assert exc.value.detail["field"] == "expected_return_at"


def test_bulk_assignment_status_change(db, make_asset, assign, employee, manager):
    assignment = assign(make_asset(), employee)

    result = bulk_crud.bulk_assignment_operations(
        db, BulkAssignmentRequest(operation="status_change", ids=[assignment.id],
                                  data={"status": "overdue"}), manager)

    assert result.successful_items == 1
    flagged = reload(db, AssetAssignment, assignment.id)
    assert flagged.status == "overdue"
    assert flagged.is_active is True


def test_bulk_assignment_limit(db, manager, monkeypatch):
    monkeypatch.setattr(settings, "BULK_ASSIGNMENT_LIMIT", 1)
    with pytest.raises(HTTPException) as exc:
        bulk_crud.bulk_assignment_operations(
            db, BulkAssignmentRequest(operation="return", ids=[1, 2]), manager)
    assert exc.value.detail["field"] == "ids"
