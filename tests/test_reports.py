import io
from datetime import timedelta

import pandas as pd
import pytest
from fastapi import HTTPException

from shared.exporthelper import to_csv
from shared.utils.datetime_utils import utc_now
from inventory_service.app.crud.inventory import reports_crud


def test_dashboard_metrics(db, make_asset, assign, employee):
    laptop = make_asset()
    make_asset(category="monitor")
    make_asset(category="monitor", status="repair")
    make_asset(name="Soon", warranty_expiry=utc_now() + timedelta(days=10))
    make_asset(name="Later", warranty_expiry=utc_now() + timedelta(days=400))
    late = assign(laptop, employee)
    late.expected_return_at = utc_now() - timedelta(days=1)
    db.commit()

    metrics = reports_crud.get_dashboard_metrics(db)

    assert metrics.total_assets == 5
    assert metrics.assigned_assets == 1
    assert metrics.available_assets == 3
    assert metrics.utilization_rate == 20
    assert metrics.assets_by_category["monitor"] == 2
    assert metrics.assets_by_status["repair"] == 1
    assert metrics.active_assignments == 1
    assert metrics.overdue_assignments == 1
    assert [w.name for w in metrics.warranty_expiring] == ["Soon"]


def test_empty_inventory_has_zero_utilization(db):
    metrics = reports_crud.get_dashboard_metrics(db)
    assert metrics.total_assets == 0
    assert metrics.utilization_rate == 0


def test_asset_export_uses_friendly_columns(db, make_asset):
    make_asset(name="ThinkPad", serial_number="PF-1")

    export = reports_crud.export_report(db, "assets")
    frame = pd.read_csv(io.StringIO(to_csv(export, reports_crud.report_columns("assets"))))

    assert export.filename.startswith("assets_") and export.filename.endswith(".csv")
    assert frame.loc[0, "Asset Tag"] == "IT-LAP-0001"
    assert frame.loc[0, "Serial Number"] == "PF-1"


def test_assignment_export_flags_overdue(db, make_asset, assign, employee):
    assignment = assign(make_asset(), employee)
    assignment.expected_return_at = utc_now() - timedelta(hours=1)
    db.commit()

    rows = reports_crud.export_report(db, "assignments").data

    assert rows[0]["Assigned To"] == employee.name
    assert rows[0]["Overdue"] == "Yes"


def test_empty_export_still_has_headers(db):
    export = reports_crud.export_report(db, "warranty")
    csv = to_csv(export, reports_crud.report_columns("warranty"))
    assert csv.splitlines()[0].startswith("Asset Tag,Name")


def test_unknown_report_type(db):
    with pytest.raises(HTTPException) as exc:
        reports_crud.export_report(db, "payroll")
    assert exc.value.status_code == 400
    assert exc.value.detail["field"] == "type"
