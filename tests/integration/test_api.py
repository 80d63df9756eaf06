"""
Integration tests for the reports HTTP API.

The app gets a ReportEngine over the in-memory FakeRecordSource before
startup, so no DuckDB file is opened.
"""
import pytest
from fastapi.testclient import TestClient

from reporting.assembler import ReportEngine
from reporting.observability import metrics
from web.main import app
from web.routes.api._deps import limiter

pytestmark = pytest.mark.integration

JANUARY = {"start_date": "2026-01-01", "end_date": "2026-01-31"}


def _client(source, settings):
    app.state.engine = ReportEngine(source, settings=settings)
    return TestClient(app)


@pytest.fixture(autouse=True)
def no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True
    app.state.engine = None


@pytest.fixture
def client(fake_source, settings):
    with _client(fake_source, settings) as test_client:
        yield test_client


class TestGetReport:
    """Tests for GET /api/reports."""

    def test_sales(self, client):
        response = client.get("/api/reports", params={"type": "sales", **JANUARY})
        assert response.status_code == 200

        data = response.json()
        assert data["totalSales"] == 450
        assert data["totalOrders"] == 3
        assert data["averageOrderValue"] == 150
        assert data["trends"] == {"salesPct": 125, "ordersPct": 200, "aovPct": -25}
        assert data["topProducts"][0]["id"] == "P2"

    def test_financial(self, client):
        data = client.get("/api/reports", params={"type": "financial", **JANUARY}).json()
        assert data["totalRevenue"] == 400
        assert data["netProfit"] == -200
        assert data["previousPeriod"]["totalRevenue"] == 200

    def test_inventory(self, client):
        data = client.get("/api/reports", params={"type": "inventory", **JANUARY}).json()
        assert data["lowStockItems"] == 1
        assert data["outOfStockItems"] == 1
        assert data["trends"] == {}

    def test_customers(self, client):
        data = client.get("/api/reports", params={"type": "customers", **JANUARY}).json()
        assert data["totalCustomers"] == 3
        assert data["customerSegments"][2] == {"segment": "Nuevo", "count": 2, "percentage": 66.67}

    def test_branch_filter(self, client):
        data = client.get("/api/reports", params={"type": "sales", "branch_id": "B2", **JANUARY}).json()
        assert data["totalSales"] == 300

    def test_period_shortcut(self, client):
        """A period with no data is an empty report, not an error."""
        response = client.get("/api/reports", params={"type": "sales", "period": "today"})
        assert response.status_code == 200
        assert response.json()["totalOrders"] == 0

    def test_correlation_header(self, client):
        response = client.get(
            "/api/reports",
            params={"type": "sales", **JANUARY},
            headers={"X-Request-ID": "abc123"},
        )
        assert response.headers["X-Request-ID"] == "abc123"
        assert "X-Response-Time" in response.headers

    def test_http_metrics_keyed_by_family(self, client):
        requests = metrics.get_stats()["requests"]
        before = requests.get("http.report.financial", 0)

        client.get("/api/reports", params={"type": "financial", **JANUARY})
        client.get("/api/reports", params={"type": "payroll", **JANUARY})

        requests = metrics.get_stats()["requests"]
        assert requests["http.report.financial"] == before + 1
        assert requests["http.report.invalid"] >= 1
        assert "http.report.financial" in metrics.get_stats()["timing"]

    @pytest.mark.parametrize("params", [
        {"type": "payroll", **JANUARY},
        {"type": "sales", "start_date": "2026-02-01", "end_date": "2026-01-01"},
        {"type": "sales", "start_date": "2026-01-01"},
        {"type": "sales", "start_date": "01/01/2026", "end_date": "2026-01-31"},
        {"type": "sales", "start_date": "2024-01-01", "end_date": "2026-01-31"},
        {"type": "sales", "period": "fortnight"},
        {"type": "sales", "branch_id": "B1; DROP TABLE sales", **JANUARY},
    ])
    def test_bad_request(self, client, params):
        response = client.get("/api/reports", params=params)
        assert response.status_code == 400

    def test_missing_type(self, client):
        assert client.get("/api/reports", params=JANUARY).status_code == 422

    def test_source_unavailable(self, failing_source, settings):
        with _client(failing_source, settings) as failing_client:
            response = failing_client.get("/api/reports", params={"type": "sales", **JANUARY})

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "30"
        assert "temporarily unavailable" in response.json()["detail"]


class TestCompare:
    """Tests for GET /api/reports/compare."""

    def test_overall(self, client):
        response = client.get("/api/reports/compare", params={
            "start_date_a": "2025-12-01", "end_date_a": "2025-12-31",
            "start_date_b": "2026-01-01", "end_date_b": "2026-01-31",
        })
        assert response.status_code == 200

        data = response.json()
        assert data["deltas"]["revenueChangePct"] == 125
        assert data["periodB"]["summary"]["totalOrders"] == 3
        assert "byCategory" not in data["periodB"]
        assert "http.report.compare" in metrics.get_stats()["requests"]

    def test_category_dimension(self, client):
        data = client.get("/api/reports/compare", params={
            "start_date_a": "2025-12-01", "end_date_a": "2025-12-31",
            "start_date_b": "2026-01-01", "end_date_b": "2026-01-31",
            "dimension": "category", "group_by": "month",
        }).json()
        assert data["periodB"]["byCategory"][0]["category"] == "comida"
        assert data["periodB"]["byDate"][0]["key"] == "2026-01"

    def test_invalid_dimension(self, client):
        response = client.get("/api/reports/compare", params={
            "start_date_a": "2025-12-01", "end_date_a": "2025-12-31",
            "start_date_b": "2026-01-01", "end_date_b": "2026-01-31",
            "dimension": "branch",
        })
        assert response.status_code == 400


class TestReportTypes:
    """Tests for GET /api/reports/types."""

    def test_catalog(self, client):
        response = client.get("/api/reports/types")
        assert response.status_code == 200

        types = response.json()
        assert [t["id"] for t in types] == ["sales", "inventory", "customers", "financial"]
        assert "exportFormats" not in types[0]
        assert types[0]["cacheTtlSeconds"] == 60


class TestHealth:
    """Tests for GET /api/health."""

    def test_healthy(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] is None
        assert "requests" in data["metrics"]
