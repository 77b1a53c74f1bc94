"""
E2E tests for the HTTP surface: envelopes, status codes and auth.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from ectracc.core.security import create_access_token
from ectracc.database import get_db
from ectracc.main import app
from ectracc.services.catalog_service import CatalogService


@pytest.fixture
def override_get_db(test_db):
    def _get_db():
        yield test_db
    app.dependency_overrides[get_db] = _get_db
    yield
    del app.dependency_overrides[get_db]


@pytest.fixture
def catalog_app(mock_store):
    app.state.catalog_service = CatalogService(mock_store)
    yield
    app.state.catalog_service = None


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token('user-1', email='user@example.com')}"}


@pytest.mark.e2e
class TestProductEndpoints:
    def test_search_envelope(self, client, catalog_app, mock_store, sample_products):
        async def _aggregate(pipeline):
            if "$count" in pipeline[-1]:
                return [{"total": 2}]
            return sample_products
        mock_store.aggregate.side_effect = _aggregate

        response = client.get(
            "/api/products/search",
            params={"q": " water ", "ecoScore": ["A", "E"], "sortBy": "carbon_asc"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["id"] for p in body["data"]] == [str(p["_id"]) for p in sample_products]
        assert body["meta"]["pagination"]["total"] == 2
        assert body["meta"]["query"]["q"] == "water"
        assert body["meta"]["query"]["ecoScore"] == ["A", "E"]

    def test_search_rejects_unknown_grade(self, client, catalog_app, mock_store):
        response = client.get("/api/products/search", params={"ecoScore": "F"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        mock_store.aggregate.assert_not_called()

    def test_search_rejects_too_many_categories(self, client, catalog_app):
        response = client.get(
            "/api/products/search", params={"category": [f"c{i}" for i in range(11)]}
        )

        assert response.status_code == 400
        assert response.json()["operation"] == "search"

    def test_search_rejects_large_limit(self, client, catalog_app):
        response = client.get("/api/products/search", params={"limit": 51})

        assert response.status_code == 400

    def test_barcode_found(self, client, catalog_app, mock_store, sample_products):
        mock_store.find_one.return_value = sample_products[0]

        response = client.get("/api/products/barcode/8076800195057")

        assert response.status_code == 200
        assert response.json()["data"]["barcode"] == "8076800195057"

    def test_barcode_not_found(self, client, catalog_app):
        response = client.get("/api/products/barcode/00000000")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Product not found"}

    def test_barcode_must_be_digits(self, client, catalog_app, mock_store):
        response = client.get("/api/products/barcode/12ab5678")

        assert response.status_code == 400
        mock_store.find_one.assert_not_called()

    def test_stats(self, client, catalog_app):
        response = client.get("/api/products/stats")

        assert response.status_code == 200
        assert response.json()["data"]["totalProducts"] == 0

    def test_alternatives_for_unknown_product(self, client, catalog_app):
        response = client.get("/api/products/64b0000000000000000000ff/alternatives")

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_catalog_unavailable(self, client):
        response = client.get("/api/products/search", params={"q": "water"})

        assert response.status_code == 503
        assert response.json()["success"] is False
        assert response.json()["operation"] == "catalog"


@pytest.mark.e2e
class TestFootprintEndpoints:
    def test_requires_token(self, client, override_get_db):
        response = client.get("/api/footprints/history")

        assert response.status_code == 401
        assert response.json()["error"] == "Authorization token required"

    def test_rejects_expired_token(self, client, override_get_db):
        token = create_access_token("user-1", expires_delta=timedelta(minutes=-5))

        response = client.get(
            "/api/footprints/history", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    def test_track_then_history(self, client, override_get_db, auth_headers):
        payload = {
            "manual_item": "Commute by car",
            "amount": 20,
            "carbon_total": 3.4,
            "category": "transport",
            "logged_at": "2024-06-12T08:00:00Z",
        }

        created = client.post("/api/footprints/track", json=payload, headers=auth_headers)

        assert created.status_code == 200
        assert created.json()["data"]["user_id"] == "user-1"

        response = client.get(
            "/api/footprints/history",
            params={"period": "weekly", "start_date": "2024-06-01T00:00:00", "end_date": "2024-06-30T00:00:00"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["aggregated"] == [{
            "period": "2024-06-10",
            "total_carbon": 3.4,
            "count": 1,
            "categories": {"transport": 3.4},
        }]
        assert data["raw_data"][0]["manual_item"] == "Commute by car"

    def test_track_requires_item_source(self, client, override_get_db, auth_headers):
        payload = {"amount": 1, "carbon_total": 1, "category": "food"}

        response = client.post("/api/footprints/track", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert "Exactly one of product_barcode or manual_item" in response.json()["error"]

    def test_history_rejects_unknown_period(self, client, override_get_db, auth_headers):
        response = client.get(
            "/api/footprints/history", params={"period": "daily"}, headers=auth_headers
        )

        assert response.status_code == 400

    def test_category_breakdown(self, client, override_get_db, auth_headers, add_footprint):
        add_footprint(carbon_total=10, category="food", logged_at=None)
        add_footprint(carbon_total=5, category="transport", logged_at=None)

        response = client.get(
            "/api/footprints/category-breakdown",
            params={"start_date": "2024-06-01T00:00:00", "end_date": "2024-06-30T00:00:00"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_carbon"] == 15
        assert {c["category"]: c["percentage"] for c in data["categories"]} == {
            "food": 67, "transport": 33,
        }

    def test_goals_roundtrip(self, client, override_get_db, auth_headers):
        client.post(
            "/api/footprints/goals", json={"target_value": 50, "timeframe": "weekly"},
            headers=auth_headers,
        )
        client.post(
            "/api/footprints/goals", json={"target_value": 35, "timeframe": "weekly"},
            headers=auth_headers,
        )

        response = client.get("/api/footprints/goals", headers=auth_headers)

        goals = response.json()["data"]
        assert len(goals) == 1
        assert goals[0]["target_value"] == 35


@pytest.mark.e2e
class TestHealthEndpoints:
    def test_healthcheck(self, client):
        response = client.get("/api/healthcheck")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "OK"
        assert data["services"]["mongodb"] == "unavailable"
        assert data["services"]["footprints_db"] == "connected"

    def test_ping(self, client):
        response = client.get("/api/ping")

        assert response.json()["message"] == "pong"
