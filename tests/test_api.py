from dataclasses import replace
from datetime import date
from io import BytesIO

import pytest
from openpyxl import load_workbook

from target_tracker.api import create_app
from target_tracker.errors import DataFetchError
from target_tracker.store import InMemoryStore

from conftest import make_runner, make_target


@pytest.fixture
def client(store):
    app = create_app(store)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    assert client.get("/").get_json() == {"ok": True}


def test_list_runners(client):
    body = client.get("/api/runners").get_json()
    ids = [r["id"] for r in body["data"]]
    assert ids == ["R1", "R2", "R3", "R4"]
    r1 = body["data"][0]
    assert r1["totalDistance"] == 14.0
    assert r1["totalSessions"] == 2
    assert r1["status"] == "achieved"
    assert r1["createdAt"].startswith("2025-01-10")


def test_list_targets_newest_first(client):
    data = client.get("/api/targets/14km").get_json()["data"]
    assert [t["id"] for t in data] == ["S3", "S1", "S2", "S4"]
    s1 = data[1]
    assert s1["time_taken"] == "1:10:30"
    assert s1["pace"] == "5'02\"/km"
    assert s1["achieved_date"] == "2025-03-20"
    assert s1["validation_status"] == "pending"


def test_validate_flow():
    store = InMemoryStore(targets=[make_target("T9", "R1", date(2025, 3, 20))])
    client = create_app(store).test_client()

    first = client.post("/api/targets/14km/validate/T9")
    assert first.status_code == 200
    assert first.get_json()["data"]["id"] == "T9"
    assert first.get_json()["data"]["validation_status"] == "validated"

    second = client.post("/api/targets/14km/validate/T9")
    assert second.status_code == 200
    assert second.get_json() == first.get_json()


def test_validate_unknown_returns_404(client, store):
    before = [t.validation_status for t in store.list_targets()]
    response = client.post("/api/targets/14km/validate/missing")
    assert response.status_code == 404
    assert response.get_json() == {"message": "Target record not found"}
    assert [t.validation_status for t in store.list_targets()] == before


def test_dashboard(client):
    data = client.get("/api/dashboard").get_json()["data"]
    assert data["summary"]["total"] == 4
    assert data["summary"]["validated"] == 1
    assert data["summary"]["pending"] == 3
    assert data["summary"]["runners_total"] == 4
    assert len(data["recent"]) == 4


def test_report_download_xlsx(client):
    response = client.get("/api/reports/14km?format=xlsx&period=all&search=dewi")
    assert response.status_code == 200
    assert "laporan-14km-all.xlsx" in response.headers["Content-Disposition"]
    ws = load_workbook(BytesIO(response.data))["Laporan"]
    assert ws["A1"].value == "Laporan Khusus Target 14 KM"
    assert ws.max_row == 5 + 2


def test_report_download_pdf_default(client):
    response = client.get("/api/reports/target")
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")


def test_report_bad_inputs(client):
    assert client.get("/api/reports/weekly").status_code == 404
    assert client.get("/api/reports/14km?format=docx").status_code == 400
    assert client.get("/api/reports/14km?period=yesterday").status_code == 400


class FailingStore(InMemoryStore):
    """Store whose reads fail the way an unreachable backend would."""

    def list_runners(self):
        raise DataFetchError("database offline")

    def list_targets(self):
        raise DataFetchError("database offline")


@pytest.fixture
def failing_client():
    return create_app(FailingStore()).test_client()


def test_listings_degrade_to_empty_when_store_fails(failing_client):
    for path in ("/api/runners", "/api/targets/14km"):
        response = failing_client.get(path)
        assert response.status_code == 200
        assert response.get_json() == {"data": [], "degraded": True}
        assert response.headers["X-Report-Degraded"] == "1"


def test_dashboard_degrades_to_empty_when_store_fails(failing_client):
    response = failing_client.get("/api/dashboard")
    assert response.status_code == 200
    body = response.get_json()
    assert body["degraded"] is True
    assert body["data"]["summary"]["total"] == 0
    assert body["data"]["summary"]["runners_total"] == 0
    assert body["data"]["recent"] == []


def test_report_download_marks_degraded(failing_client):
    response = failing_client.get("/api/reports/14km?format=xlsx")
    assert response.status_code == 200
    assert response.headers["X-Report-Degraded"] == "1"
    ws = load_workbook(BytesIO(response.data))["Laporan"]
    assert ws.max_row == 5


def test_runner_detail_unavailable_when_store_fails(failing_client):
    response = failing_client.get("/api/runners/R1")
    assert response.status_code == 503
    assert response.get_json()["degraded"] is True


def test_healthy_listing_is_not_degraded(client):
    response = client.get("/api/runners")
    assert response.get_json()["degraded"] is False
    assert "X-Report-Degraded" not in response.headers


def test_runner_filters(client):
    achieved = client.get("/api/runners?status=achieved").get_json()["data"]
    assert [r["id"] for r in achieved] == ["R1", "R4"]
    not_started = client.get("/api/runners?status=not_started").get_json()["data"]
    assert [r["id"] for r in not_started] == ["R3"]
    assert client.get("/api/runners?status=finished").status_code == 400


def test_runner_unit_filter():
    store = InMemoryStore(
        runners=[
            replace(make_runner("R1", "Budi", 14.0), unit="Kodam I"),
            make_runner("R2", "Andi", 3.0),
        ]
    )
    client = create_app(store).test_client()
    data = client.get("/api/runners?unit=kodam i").get_json()["data"]
    assert [r["id"] for r in data] == ["R1"]


def test_runner_detail(client):
    body = client.get("/api/runners/R4").get_json()
    data = body["data"]
    assert body["degraded"] is False
    assert data["id"] == "R4"
    assert data["status"] == "achieved"
    assert [t["id"] for t in data["history"]] == ["S3", "S2"]
    assert data["achievedDate"] == "2025-03-20"
    assert data["achievedDateLabel"] == "20 Mar 2025"
    assert data["latestTime"] == "1:30:00"
    assert data["latestPace"] == "5'38\"/km"


def test_runner_detail_without_achievements(client):
    data = client.get("/api/runners/R3").get_json()["data"]
    assert data["history"] == []
    assert data["achievedDate"] is None
    assert data["latestPace"] == "-"


def test_runner_detail_unknown(client):
    response = client.get("/api/runners/R404")
    assert response.status_code == 404
    assert response.get_json() == {"message": "Runner not found"}


def test_target_listing_takes_names_from_runners():
    store = InMemoryStore(
        runners=[make_runner("R1", "Budi Hartono", 14.0, rank="Mayor")],
        targets=[make_target("T1", "R1", date(2025, 3, 20), name="-", rank=None)],
    )
    (target,) = create_app(store).test_client().get("/api/targets/14km").get_json()["data"]
    assert target["name"] == "Budi Hartono"
    assert target["rank"] == "Mayor"
