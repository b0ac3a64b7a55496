"""
Tests for the Plan Builder API
==============================

Tests FastAPI endpoints in main.py and plan_engine.api.
"""

import pytest

from main import create_app
from plan_engine.api import format_price
from plan_engine.config import PlanEngineConfig
from plan_engine.errors import ConfigurationError


def start_session(client, **body):
    response = client.post("/api/v1/plans", json=body or None)
    assert response.status_code == 200
    return response.json()


class TestHealthEndpoint:
    """Test the health check endpoint."""

    def test_health_check(self, test_client):
        response = test_client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["modules"] == 5
        assert data["bundles"] == 2
        assert data["baseline"] == "baseline"


class TestCatalogEndpoints:
    """Test catalog listings."""

    def test_list_modules(self, test_client):
        data = test_client.get("/api/v1/modules").json()
        assert data["baseline"] == "baseline"
        assert [m["id"] for m in data["modules"]] == ["baseline", "leads", "pipeline", "reports", "qr"]
        assert data["modules"][1]["display_price"] == "$10.00"
        assert data["modules"][0]["display_price"] == "Free"

    def test_list_bundles(self, test_client):
        bundles = test_client.get("/api/v1/bundles").json()["bundles"]
        starter = bundles[0]
        assert starter["id"] == "starter"
        assert starter["monthly_price"] == 800
        assert starter["custom_price"] == 1000
        assert starter["savings"] == 200
        assert starter["display_savings"] == "$2.00"
        assert bundles[1]["display_savings"] is None


class TestPlanSessions:
    """Test the session lifecycle."""

    def test_create_session(self, test_client):
        data = start_session(test_client)
        assert data["session_id"]
        assert data["selection"]["module_ids"] == ["baseline"]
        assert data["price"] == 0
        assert data["display_price"] == "Free"
        assert data["validation"]["valid"] is True

    def test_create_from_saved_modules(self, test_client):
        data = start_session(test_client, module_ids=["baseline", "pipeline"])
        assert data["validation"]["valid"] is False
        assert data["validation"]["violations"][0]["missing_requirement"] == "leads"

    def test_create_from_bundle(self, test_client):
        data = start_session(test_client, bundle_id="starter")
        assert data["selection"]["mode"] == "bundle"
        assert data["price"] == 800

    def test_create_from_unknown_bundle(self, test_client):
        response = test_client.post("/api/v1/plans", json={"bundle_id": "platinum"})
        assert response.status_code == 404

    def test_create_from_bundle_with_extra_modules(self, test_client):
        """Modules beyond the bundle's cannot ride along at the bundle price."""
        response = test_client.post(
            "/api/v1/plans",
            json={
                "bundle_id": "starter",
                "module_ids": ["baseline", "leads", "pipeline", "reports", "qr"],
            },
        )
        assert response.status_code == 422

    def test_create_from_bundle_with_matching_modules(self, test_client):
        data = start_session(test_client, bundle_id="starter", module_ids=["leads", "baseline"])
        assert data["selection"]["mode"] == "bundle"
        assert data["selection"]["module_ids"] == ["baseline", "leads"]
        assert data["price"] == 800

    def test_create_from_modules_without_baseline(self, test_client):
        data = start_session(test_client, module_ids=["qr"])
        assert data["selection"]["module_ids"] == ["baseline", "qr"]
        assert data["price"] == 700
        assert data["validation"]["valid"] is True

    def test_toggle(self, test_client):
        session_id = start_session(test_client)["session_id"]
        response = test_client.post(f"/api/v1/plans/{session_id}/toggle/pipeline")
        assert response.status_code == 200
        data = response.json()
        assert data["selection"]["module_ids"] == ["baseline", "leads", "pipeline"]
        assert data["price"] == 2500
        assert data["display_price"] == "$25.00"
        assert data["features"] == ["lead_inbox"]

    def test_toggle_unknown_module(self, test_client):
        session_id = start_session(test_client)["session_id"]
        response = test_client.post(f"/api/v1/plans/{session_id}/toggle/ghost")
        assert response.status_code == 404

    def test_select_bundle_and_reset(self, test_client):
        session_id = start_session(test_client)["session_id"]
        data = test_client.post(f"/api/v1/plans/{session_id}/bundle/starter").json()
        assert data["price"] == 800
        assert data["selection"]["origin_bundle"] == "starter"

        data = test_client.post(f"/api/v1/plans/{session_id}/reset").json()
        assert data["price"] == 0
        assert data["selection"]["mode"] == "custom"

    def test_select_unknown_bundle(self, test_client):
        session_id = start_session(test_client)["session_id"]
        response = test_client.post(f"/api/v1/plans/{session_id}/bundle/platinum")
        assert response.status_code == 404

    def test_get_plan(self, test_client):
        session_id = start_session(test_client)["session_id"]
        test_client.post(f"/api/v1/plans/{session_id}/toggle/qr")
        data = test_client.get(f"/api/v1/plans/{session_id}").json()
        assert data["price"] == 700

    def test_unknown_session(self, test_client):
        assert test_client.get("/api/v1/plans/nope").status_code == 404
        assert test_client.post("/api/v1/plans/nope/reset").status_code == 404

    def test_delete_session(self, test_client):
        session_id = start_session(test_client)["session_id"]
        assert test_client.delete(f"/api/v1/plans/{session_id}").status_code == 200
        assert test_client.get(f"/api/v1/plans/{session_id}").status_code == 404

    def test_module_states(self, test_client):
        session_id = start_session(test_client)["session_id"]
        states = test_client.get(f"/api/v1/plans/{session_id}/modules").json()["modules"]
        by_id = {s["module_id"]: s for s in states}
        assert by_id["baseline"]["locked"] is True
        assert by_id["pipeline"]["available"] is False

    def test_quote(self, test_client):
        session_id = start_session(test_client)["session_id"]
        test_client.post(f"/api/v1/plans/{session_id}/toggle/pipeline")
        data = test_client.get(f"/api/v1/plans/{session_id}/quote").json()
        assert data["module_ids"] == ["baseline", "leads", "pipeline"]
        assert data["monthly_price"] == 2500
        assert data["line_items"] == ["price_leads", "price_pipeline"]
        assert data["valid"] is True


class TestValidateEndpoint:
    """Test validation of external selections."""

    def test_validate_selection(self, test_client):
        response = test_client.post(
            "/api/v1/plans/validate",
            json={"module_ids": ["baseline", "reports"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["validation"]["valid"] is False
        assert data["price"] == 500

    def test_validate_without_baseline(self, test_client):
        data = test_client.post("/api/v1/plans/validate", json={"module_ids": ["qr"]}).json()
        assert data["validation"]["valid"] is False
        assert data["validation"]["violations"][0]["missing_baseline"] is True

    def test_validate_requires_module_ids(self, test_client):
        response = test_client.post("/api/v1/plans/validate", json={})
        assert response.status_code == 422


class TestFeatureEndpoint:
    """Test feature gate checks."""

    def test_feature_enabled(self, test_client):
        data = test_client.get("/api/v1/features/lead_inbox", params={"modules": "baseline,leads"}).json()
        assert data["enabled"] is True
        assert data["required_modules"] == ["leads"]

    def test_feature_disabled(self, test_client):
        data = test_client.get("/api/v1/features/forecasting", params={"modules": "pipeline"}).json()
        assert data["enabled"] is False

    def test_unknown_feature(self, test_client):
        assert test_client.get("/api/v1/features/teleport").status_code == 404


class TestAppStartup:
    """Test app creation."""

    def test_bad_catalog_refuses_to_start(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text('{"modules": [], "bundles": []}')
        with pytest.raises(ConfigurationError):
            create_app(PlanEngineConfig(catalog_path=str(path)))

    def test_default_catalog_app(self):
        app = create_app(PlanEngineConfig())
        assert app.state.catalogs.modules.baseline_id == "contacts"


class TestFormatPrice:
    """Test display formatting."""

    def test_format(self):
        assert format_price(0) == "Free"
        assert format_price(999) == "$9.99"
        assert format_price(2299) == "$22.99"
        assert format_price(5) == "$0.05"
