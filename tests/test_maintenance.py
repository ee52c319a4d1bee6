from datetime import timedelta

import pytest
from fastapi import HTTPException

from shared.utils.datetime_utils import utc_now
from inventory_service.app.crud.inventory import maintenance_crud
from inventory_service.app.models.inventory.assets import Asset
from inventory_service.app.models.inventory.audit_logs import AuditLog
from inventory_service.app.schemas.inventory.maintenance_schemas import (
    MaintenanceCreate, MaintenanceRequest, MaintenanceUpdate)


def log_repair(db, asset, actor, **kwargs):
    payload = MaintenanceCreate(
        asset_id=asset.id, type="repair", title="Keyboard", description="Replaced keyboard", **kwargs)
    return maintenance_crud.create_maintenance(db, payload, actor)


def test_record_defaults_condition_before_to_the_asset(db, make_asset, manager):
    asset = make_asset(condition="fair")

    record = log_repair(db, asset, manager)

    assert record.condition_before == "fair"
    assert record.priority == "medium"
    assert record.created_by == manager.user_id
    assert db.query(AuditLog).filter(AuditLog.action == "maintenance").count() == 1


def test_completed_work_updates_asset_condition(db, make_asset, manager):
    asset = make_asset(condition="damaged")

    record = log_repair(db, asset, manager, is_completed=True, condition_after="good")

    assert record.completed_at is not None
    db.expire_all()
    assert db.get(Asset, asset.id).condition == "good"


def test_completing_later_through_update(db, make_asset, manager):
    asset = make_asset(condition="poor")
    record = log_repair(db, asset, manager)

    updated = maintenance_crud.update_maintenance(
        db, record.id, MaintenanceUpdate(is_completed=True, condition_after="excellent"), manager)

    assert updated.is_completed is True
    db.expire_all()
    assert db.get(Asset, asset.id).condition == "excellent"


def test_completion_cannot_precede_start(db, make_asset, manager):
    started = utc_now()
    with pytest.raises(HTTPException) as exc:
        log_repair(db, make_asset(), manager,
                   started_at=started, completed_at=started - timedelta(hours=2))
    assert exc.value.detail["field"] == "completed_at"


def test_maintenance_needs_a_live_asset_and_a_manager(db, make_asset, employee, actor_for, admin):
    from inventory_service.app.crud.inventory import assets_crud

    asset = make_asset()
    with pytest.raises(HTTPException) as exc:
        log_repair(db, asset, actor_for(employee))
    assert exc.value.status_code == 403

    assets_crud.delete_asset(db, asset.id, admin)
    with pytest.raises(HTTPException) as exc:
        log_repair(db, asset, admin)
    assert exc.value.status_code == 404


def test_listing_filters(db, make_asset, manager):
    first, second = make_asset(name="ThinkPad"), make_asset(name="UltraSharp", category="monitor")
    log_repair(db, first, manager)
    log_repair(db, second, manager, is_completed=True)

    assert maintenance_crud.get_maintenance_records(db, MaintenanceRequest(asset_id=first.id))["total"] == 1
    assert maintenance_crud.get_maintenance_records(db, MaintenanceRequest(is_completed=True))["total"] == 1
    found = maintenance_crud.get_maintenance_records(db, MaintenanceRequest(search="ultra"))
    assert found["records"][0].asset_name == "UltraSharp"
