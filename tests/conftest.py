"""
IRH Plan Engine Test Fixtures
=============================

Shared fixtures for all test modules.
"""

import copy

import pytest

from plan_engine.catalog import load_catalogs, default_catalog
from plan_engine.controller import SelectionController


# ============================================
# CATALOG CONFIG
# ============================================

MODULE_CONFIG = [
    {
        "id": "baseline",
        "name": "Contacts",
        "monthly_price": 0,
        "baseline": True,
    },
    {
        "id": "leads",
        "name": "Leads",
        "monthly_price": 1000,
        "requires": ["baseline"],
        "stripe_price_id": "price_leads",
    },
    {
        "id": "pipeline",
        "name": "Pipeline",
        "monthly_price": 1500,
        "requires": ["leads"],
        "popular": True,
        "stripe_price_id": "price_pipeline",
    },
    {
        "id": "reports",
        "name": "Reports",
        "monthly_price": 500,
        "requires": ["pipeline"],
        "stripe_price_id": "price_reports",
    },
    {
        "id": "qr",
        "name": "QR Capture",
        "monthly_price": 700,
        "stripe_price_id": "price_qr",
    },
]

BUNDLE_CONFIG = [
    {
        "id": "starter",
        "name": "Starter",
        "modules": ["baseline", "leads"],
        "monthly_price": 800,
        "stripe_price_id": "price_bundle_starter",
    },
    {
        "id": "complete",
        "name": "Complete",
        "modules": ["baseline", "leads", "pipeline", "reports", "qr"],
        "monthly_price": 3700,
        "popular": True,
    },
]

GATE_CONFIG = [
    {"feature": "lead_inbox", "required_modules": ["leads"]},
    {"feature": "forecasting", "required_modules": ["pipeline", "reports"]},
]


@pytest.fixture
def module_config():
    """Fresh copy of the illustrative module config."""
    return copy.deepcopy(MODULE_CONFIG)


@pytest.fixture
def bundle_config():
    """Fresh copy of the illustrative bundle config."""
    return copy.deepcopy(BUNDLE_CONFIG)


@pytest.fixture
def gate_config():
    return copy.deepcopy(GATE_CONFIG)


@pytest.fixture
def catalogs(module_config, bundle_config, gate_config):
    """Loaded illustrative catalogs."""
    return load_catalogs(module_config, bundle_config, gate_config)


@pytest.fixture
def shipped_catalogs():
    """The catalog packaged with plan_engine."""
    return default_catalog()


# ============================================
# CONTROLLER
# ============================================

@pytest.fixture
def controller(catalogs):
    """Controller in its initial state."""
    return SelectionController(catalogs, session_id="sess-test")


# ============================================
# FASTAPI TEST CLIENT
# ============================================

@pytest.fixture
def test_client(catalogs):
    """FastAPI test client over the illustrative catalog."""
    from fastapi.testclient import TestClient

    from main import create_app
    from plan_engine.config import PlanEngineConfig

    app = create_app(PlanEngineConfig(session_rate_limit="1000/minute"), catalogs=catalogs)
    with TestClient(app) as client:
        yield client
