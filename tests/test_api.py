"""
API tests for sales, analysis, report and config routes
"""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from salespulse.main import app
from salespulse.config import get_settings
from salespulse.database import get_record_store, get_session


@pytest.fixture
def client(memory_store, config, engine):
    def _session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_record_store] = lambda: memory_store
    app.dependency_overrides[get_settings] = lambda: config
    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _submit(client, branch, sales_date, **raw):
    return client.post("/sales", json={"branch": branch, "sales_date": sales_date, **raw})


@pytest.fixture
def seeded(client):
    _submit(client, "A", "2024-03-02", in_store_sales=1200, target_sales=900)
    _submit(client, "A", "2024-03-01", in_store_sales=1000, target_sales=900)
    _submit(client, "B", "2024-03-01", grab_sales=500, target_sales=400)
    return client


class TestSalesEndpoints:
    """POST /sales and GET /sales"""

    def test_submit(self, client):
        response = _submit(
            client, "A", "2024-03-01", in_store_sales="1500", num_bills=0, target_sales=1000
        )
        assert response.status_code == 200
        record = response.json()["record"]
        assert record["record_key"] == "A-2024-03-01"
        assert record["total_sales"] == 1500
        assert record["sales_percentage"] == pytest.approx(50.0)
        assert record["everest_per_bill"] == 0

    def test_malformed_numbers_become_zero(self, client):
        response = _submit(client, "A", "2024-03-01", in_store_sales="abc", ta_sales=None)
        assert response.status_code == 200
        assert response.json()["record"]["total_sales"] == 0

    def test_oversized_number_becomes_zero(self, client):
        response = _submit(client, "A", "2024-03-01", in_store_sales=10**400, ta_sales=5)
        assert response.status_code == 200
        assert response.json()["record"]["total_sales"] == 5

    def test_unknown_branch(self, client):
        response = _submit(client, "Z", "2024-03-01", in_store_sales=1)
        assert response.status_code == 400
        assert "Unknown branch" in response.json()["detail"]

    def test_bad_date(self, client):
        assert _submit(client, "A", "not-a-date").status_code == 422

    def test_resubmit_replaces(self, client, memory_store):
        _submit(client, "A", "2024-03-01", in_store_sales=100)
        _submit(client, "A", "2024-03-01", in_store_sales=700)
        assert len(memory_store.current_snapshot()) == 1
        response = client.get("/sales/A/2024-03-01")
        assert response.json()["record"]["total_sales"] == 700

    def test_get_missing(self, client):
        assert client.get("/sales/A/2024-01-01").status_code == 404

    def test_list_sorted(self, seeded):
        response = seeded.get("/sales", params={"month": 3, "year": 2024, "branch": "A"})
        data = response.json()
        assert data["status"] == "success"
        assert data["count"] == 2
        assert [r["sales_date"] for r in data["records"]] == ["2024-03-01", "2024-03-02"]

    def test_list_empty(self, seeded):
        data = seeded.get("/sales", params={"month": 5, "year": 2024}).json()
        assert data["status"] == "no_data"
        assert data["records"] == []


class TestAnalysisEndpoints:
    """GET /summary and GET /analysis"""

    def test_summary(self, seeded):
        response = seeded.get("/summary", params={"month": 3, "year": 2024, "branch": "A"})
        assert response.status_code == 200
        summary = response.json()
        assert summary["status"] == "ok"
        assert summary["monthly_total_sales"] == 2200
        assert summary["monthly_target_sales"] == 1800
        assert summary["monthly_sales_percentage"] == pytest.approx(22.2222, rel=1e-4)

    def test_summary_all_branches(self, seeded):
        summary = seeded.get("/summary", params={"month": 3, "year": 2024}).json()
        assert summary["branch"] == "All"
        assert summary["record_count"] == 3
        assert [s["channel"] for s in summary["channel_shares"]] == [
            "in_store_sales",
            "grab_sales",
        ]
        assert len(summary["daily_series"]) == 2

    def test_summary_no_data(self, seeded):
        summary = seeded.get("/summary", params={"month": 1, "year": 2020}).json()
        assert summary["status"] == "no_data"
        assert summary["monthly_total_sales"] == 0

    def test_analysis(self, seeded):
        data = seeded.get("/analysis", params={"month": 3, "year": 2024, "branch": "A"}).json()
        report = data["report"]
        assert report["status"] == "ok"
        assert report["trend"] == "increasing"
        assert report["performance_band"] == "excellent, well above target"
        assert report["max_day"]["sales_date"] == "2024-03-02"
        assert report["min_day"]["sales_date"] == "2024-03-01"
        assert report["narrative"].startswith("Sales are trending up")
        assert data["currency"] == "THB"

    def test_analysis_insufficient(self, seeded):
        report = seeded.get(
            "/analysis", params={"month": 3, "year": 2024, "branch": "B"}
        ).json()["report"]
        assert report["status"] == "insufficient_data"
        assert report["trend"] is None

    def test_invalid_branch_filter(self, client):
        response = client.get("/summary", params={"month": 3, "year": 2024, "branch": "Z"})
        assert response.status_code == 400

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, client, month):
        assert client.get("/analysis", params={"month": month, "year": 2024}).status_code == 422


class TestReportEndpoints:
    """Stored period reports"""

    def test_latest_before_any_run(self, client):
        assert client.get("/reports/latest").json()["status"] == "no_data"

    def test_run_and_read(self, seeded):
        response = seeded.post("/reports/run", json={"month": 3, "year": 2024})
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 4
        assert [r["branch"] for r in data["results"]] == ["All", "A", "B", "C"]

        latest = seeded.get("/reports/latest", params={"branch": "A"}).json()
        assert latest["status"] == "success"
        assert latest["period"] == "2024-03"
        assert latest["analysis"]["report"]["trend"] == "increasing"

        listed = seeded.get("/reports", params={"month": 3, "year": 2024}).json()
        assert listed["count"] == 4

    def test_run_rejects_unknown_branch(self, client):
        response = client.post("/reports/run", json={"month": 3, "year": 2024, "branches": ["Z"]})
        assert response.status_code == 400

    def test_run_rejects_bad_month(self, client):
        assert client.post("/reports/run", json={"month": 14}).status_code == 422


class TestSystemEndpoints:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_branches(self, client):
        data = client.get("/config/branches").json()
        assert data["app_id"] == "test-tenant"
        assert data["branches"] == ["A", "B", "C"]
        assert data["all_sentinel"] == "All"
