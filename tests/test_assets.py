import pytest
from fastapi import HTTPException

from shared.core.config import settings
from shared.core.database import SessionLocal
from shared.utils.app_status_code import AppStatusCode
from inventory_service.app.crud.inventory import assets_crud
from inventory_service.app.helpers import revalidation
from inventory_service.app.models.inventory.asset_counters import AssetCounter
from inventory_service.app.models.inventory.assets import Asset
from inventory_service.app.models.inventory.audit_logs import AuditLog
from inventory_service.app.models.inventory.maintenance_records import MaintenanceRecord
from inventory_service.app.schemas.inventory.assets_schemas import AssetCreate, AssetsRequest, AssetUpdate


def live_asset_count(db):
    return db.query(Asset).filter(Asset.is_deleted == False).count()


def test_create_without_tag_generates_category_tag(make_asset):
    asset = make_asset(name="Dell Latitude", category="laptop")

    assert asset.asset_tag == "IT-LAP-0001"
    assert asset.status == "available"
    assert asset.condition == "good"
    assert asset.is_deleted is False


def test_generated_tags_are_consecutive_per_category(make_asset):
    first = make_asset(category="laptop")
    second = make_asset(category="laptop")
    desktop = make_asset(name="OptiPlex", category="desktop")
    license_ = make_asset(name="Office 365", category="software_license")

    assert first.asset_tag == "IT-LAP-0001"
    assert second.asset_tag == "IT-LAP-0002"
    assert desktop.asset_tag == "IT-DSK-0001"
    assert license_.asset_tag == "IT-SW-0001"


def test_generated_tag_skips_numbers_already_taken(make_asset):
    make_asset(asset_tag="IT-LAP-0001")
    generated = make_asset()

    assert generated.asset_tag == "IT-LAP-0002"


def test_supplied_tag_is_normalized(make_asset):
    asset = make_asset(asset_tag="  it-mon-0042 ", category="monitor")
    assert asset.asset_tag == "IT-MON-0042"


@pytest.mark.parametrize("tag", ["LAP-0001", "IT-LAPTOP-0001", "IT-L-0001", "IT-LAP-01"])
def test_malformed_tag_is_rejected_without_write(db, make_asset, tag):
    with pytest.raises(HTTPException) as exc:
        make_asset(asset_tag=tag)

    assert exc.value.status_code == 400
    assert exc.value.detail["field"] == "asset_tag"
    assert live_asset_count(db) == 0


def test_duplicate_tag_is_a_conflict_regardless_of_case(db, make_asset):
    make_asset(asset_tag="IT-LAP-0100")

    with pytest.raises(HTTPException) as exc:
        make_asset(asset_tag="it-lap-0100")

    assert exc.value.status_code == 409
    assert exc.value.detail["status_code"] == AppStatusCode.DUPLICATE_ADD_ERROR
    assert exc.value.detail["field"] == "asset_tag"
    assert live_asset_count(db) == 1


def test_duplicate_serial_number_is_a_conflict(make_asset):
    make_asset(serial_number="SN-123")

    with pytest.raises(HTTPException) as exc:
        make_asset(serial_number="sn-123")

    assert exc.value.detail["field"] == "serial_number"


def test_deleted_asset_releases_its_tag(db, make_asset, admin):
    asset = make_asset(asset_tag="IT-PRN-0007", category="printer")
    assets_crud.delete_asset(db, asset.id, admin)

    again = make_asset(asset_tag="IT-PRN-0007", category="printer")
    assert again.id != asset.id


def test_create_cannot_start_assigned(make_asset):
    with pytest.raises(HTTPException) as exc:
        make_asset(status="assigned")
    assert exc.value.detail["field"] == "status"


def test_missing_actor_and_low_role_are_reported_distinctly(db, make_user, actor_for):
    payload = AssetCreate(name="iPad", category="tablet")

    with pytest.raises(HTTPException) as exc:
        assets_crud.create_asset(db, payload, None)
    assert exc.value.status_code == 401
    assert exc.value.detail["message"] == "Unauthorized"

    viewer = actor_for(make_user(role="viewer"))
    with pytest.raises(HTTPException) as exc:
        assets_crud.create_asset(db, payload, viewer)
    assert exc.value.status_code == 403
    assert exc.value.detail["message"] == "Insufficient permissions"
    assert exc.value.detail["status_code"] == AppStatusCode.UNAUTHORIZED_ACTION


def test_update_into_existing_tag_fails_and_writes_nothing(db, make_asset, manager):
    make_asset(asset_tag="IT-LAP-0001")
    other = make_asset(asset_tag="IT-LAP-0002")

    with pytest.raises(HTTPException) as exc:
        assets_crud.update_asset(db, other.id, AssetUpdate(asset_tag="it-lap-0001"), manager)

    assert exc.value.status_code == 409
    db.expire_all()
    assert db.get(Asset, other.id).asset_tag == "IT-LAP-0002"


def test_update_keeps_unset_fields_and_nulls_blank_ones(db, make_asset, manager):
    asset = make_asset(model="Latitude 7440", notes="spare charger", building="HQ")

    updated = assets_crud.update_asset(
        db, asset.id, AssetUpdate(notes="", room="3.14"), manager)

    assert updated.notes is None
    assert updated.room == "3.14"
    assert updated.model == "Latitude 7440"
    assert updated.building == "HQ"


def test_update_cannot_clear_required_fields(db, make_asset, manager):
    asset = make_asset()
    with pytest.raises(HTTPException) as exc:
        assets_crud.update_asset(db, asset.id, AssetUpdate(name=""), manager)
    assert exc.value.detail["field"] == "name"


def test_update_cannot_move_status_into_or_out_of_assigned(db, make_asset, manager, assign, employee):
    free = make_asset()
    with pytest.raises(HTTPException) as exc:
        assets_crud.update_asset(db, free.id, AssetUpdate(status="assigned"), manager)
    assert exc.value.detail["status_code"] == AppStatusCode.INVALID_STATE_TRANSITION

    taken = make_asset()
    assign(taken, employee)
    with pytest.raises(HTTPException):
        assets_crud.update_asset(db, taken.id, AssetUpdate(status="repair"), manager)


def test_update_missing_asset_is_not_found(db, manager):
    with pytest.raises(HTTPException) as exc:
        assets_crud.update_asset(db, 999, AssetUpdate(name="x"), manager)
    assert exc.value.status_code == 404
    assert exc.value.detail["status_code"] == AppStatusCode.RESOURCE_NOT_FOUND


def test_delete_requires_admin(db, make_asset, manager):
    asset = make_asset()
    with pytest.raises(HTTPException) as exc:
        assets_crud.delete_asset(db, asset.id, manager)
    assert exc.value.status_code == 403


def test_delete_is_soft(db, make_asset, admin):
    asset = make_asset()
    assets_crud.delete_asset(db, asset.id, admin)

    db.expire_all()
    assert db.get(Asset, asset.id).is_deleted is True
    assert assets_crud.get_asset_by_id(db, asset.id) is None

    with pytest.raises(HTTPException) as exc:
        assets_crud.delete_asset(db, asset.id, admin)
    assert exc.value.status_code == 404


def test_delete_is_refused_while_assigned(db, make_asset, admin, assign, employee):
    asset = make_asset()
    assign(asset, employee)

    for _ in range(2):
        with pytest.raises(HTTPException) as exc:
            assets_crud.delete_asset(db, asset.id, admin)
        assert exc.value.detail["status_code"] == AppStatusCode.ASSET_DELETE_BLOCKED
        assert "returned first" in exc.value.detail["message"]

    db.expire_all()
    assert db.get(Asset, asset.id).is_deleted is False


def test_delete_is_refused_with_maintenance_history(db, make_asset, admin, monkeypatch):
    asset = make_asset()
    db.add(MaintenanceRecord(asset_id=asset.id, type="repair",
                             title="Screen", description="Replaced panel"))
    db.commit()

    with pytest.raises(HTTPException) as exc:
        assets_crud.delete_asset(db, asset.id, admin)
    assert exc.value.detail["status_code"] == AppStatusCode.ASSET_DELETE_BLOCKED

    monkeypatch.setattr(settings, "STRICT_ASSET_DELETE", False)
    deleted = assets_crud.delete_asset(db, asset.id, admin)
    assert deleted.is_deleted is True
    assert db.query(MaintenanceRecord).count() == 1


def test_next_tag_preview_does_not_consume_the_counter(db, make_asset):
    make_asset()

    preview = assets_crud.next_asset_tag(db, "laptop")
    assert preview.asset_tag == "IT-LAP-0002"
    assert preview.prefix == "LAP"
    assert assets_crud.next_asset_tag(db, "laptop").asset_tag == "IT-LAP-0002"
    assert make_asset().asset_tag == "IT-LAP-0002"
    assert assets_crud.next_asset_tag(db, "toner").asset_tag == "IT-TON-0001"


def test_get_assets_filters(db, make_asset, assign, employee):
    laptop = make_asset(name="ThinkPad X1", serial_number="PF-42")
    make_asset(name="UltraSharp", category="monitor")
    assign(laptop, employee)

    by_search = assets_crud.get_assets(db, AssetsRequest(search="pf-4"))
    assert [a.id for a in by_search["assets"]] == [laptop.id]

    monitors = assets_crud.get_assets(db, AssetsRequest(category="monitor"))
    assert monitors["total"] == 1

    assigned = assets_crud.get_assets(db, AssetsRequest(is_assigned=True))
    assert [a.id for a in assigned["assets"]] == [laptop.id]

    unassigned = assets_crud.get_assets(db, AssetsRequest(is_assigned=False))
    assert unassigned["total"] == 1


def test_writes_revalidate_views(db, make_asset, manager):
    seen = []
    revalidation.register_listener(seen.append)

    asset = make_asset()
    assets_crud.update_asset(db, asset.id, AssetUpdate(notes="dock"), manager)

    assert "/dashboard/assets" in seen
    assert f"/dashboard/assets/{asset.id}" in seen


def test_failing_revalidation_listener_is_ignored(make_asset):
    def broken(path):
        raise RuntimeError("cache offline")

    revalidation.register_listener(broken)
    assert make_asset().asset_tag == "IT-LAP-0001"


def test_lookups_cover_every_value():
    assert {item.id for item in assets_crud.asset_status_lookup()} == {
        "available", "assigned", "maintenance", "repair", "retired", "lost", "stolen"}
    assert len(assets_crud.asset_category_lookup()) == 11
    assert len(assets_crud.asset_condition_lookup()) == 6


def test_lost_counter_race_is_not_reported_as_duplicate_tag(db, make_asset, monkeypatch):
    first_free_number = assets_crud._first_free_number
    fired = []

    def rival_creates_counter(session, category, start):
        if not fired:
            fired.append(category)
            rival = SessionLocal()
            rival.add(AssetCounter(category=category, next_number=1))
            rival.commit()
            rival.close()
        return first_free_number(session, category, start)

    monkeypatch.setattr(assets_crud, "_first_free_number", rival_creates_counter)

    with pytest.raises(HTTPException) as exc:
        make_asset()

    assert exc.value.status_code == 409
    assert exc.value.detail["status_code"] == AppStatusCode.OPERATION_ERROR
    assert "already exists" not in exc.value.detail["message"]
    assert live_asset_count(db) == 0
    assert make_asset().asset_tag == "IT-LAP-0001"


def test_apply_soft_delete_commits_without_auditing(db, make_asset, assign, employee):
    free, taken = make_asset(), make_asset()
    assign(taken, employee)
    before = db.query(AuditLog).count()

    with pytest.raises(HTTPException) as exc:
        assets_crud.apply_soft_delete(db, taken)
    assert exc.value.detail["status_code"] == AppStatusCode.ASSET_DELETE_BLOCKED

    assert assets_crud.apply_soft_delete(db, free).is_deleted is True
    assert db.query(AuditLog).count() == before


def test_specifications_are_stored_as_sent(make_asset):
    asset = make_asset(notes="", specifications={"gpu": "", "ram": "16GB", "ports": ["USB-C", ""]})

    assert asset.notes is None
    assert asset.specifications == {"gpu": "", "ram": "16GB", "ports": ["USB-C", ""]}


def test_blank_specification_values_survive_update(db, make_asset, manager):
    asset = make_asset(specifications={"cpu": "i7"})

    updated = assets_crud.update_asset(
        db, asset.id, AssetUpdate(specifications={"cpu": "i7", "gpu": ""}), manager)

    assert updated.specifications == {"cpu": "i7", "gpu": ""}
