"""
IRH Plan Engine API
===================

Entry point for the plan builder service used by the CRM store and
billing settings pages.

Endpoints:
- GET /api/health - Health check
- /api/v1/modules, /api/v1/bundles, /api/v1/plans/... - see plan_engine.api

The catalog is loaded and checked when the app is created. A broken
catalog raises ConfigurationError and the service does not start.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from plan_engine import __version__
from plan_engine.api import create_plan_api
from plan_engine.catalog import Catalogs, default_catalog, load_catalog_file
from plan_engine.config import PlanEngineConfig
from plan_engine.logging_config import configure_logging
from plan_engine.sessions import PlanSessionStore

logger = logging.getLogger(__name__)


def load_configured_catalogs(config: PlanEngineConfig) -> Catalogs:
    """Load the catalog named by config, or the packaged one."""
    if config.uses_default_catalog:
        return default_catalog()
    logger.info(f"Loading catalog from {config.catalog_path}")
    return load_catalog_file(config.catalog_path)


def create_app(
    config: Optional[PlanEngineConfig] = None,
    catalogs: Optional[Catalogs] = None,
) -> FastAPI:
    """Build the FastAPI app. Raises ConfigurationError on a bad catalog."""
    config = config or PlanEngineConfig.from_env()
    catalogs = catalogs or load_configured_catalogs(config)
    store = PlanSessionStore(catalogs, max_sessions=config.max_sessions)

    limiter = Limiter(key_func=get_remote_address)

    app = FastAPI(
        title="IRH Plan Engine",
        description="Modular subscription configuration for the IRH CRM",
        version=__version__,
    )
    app.state.limiter = limiter
    app.state.catalogs = catalogs
    app.state.sessions = store
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_plan_api(
        catalogs,
        store,
        limiter=limiter,
        session_rate_limit=config.session_rate_limit,
    ))

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "modules": len(catalogs.modules),
            "bundles": len(catalogs.bundles),
            "feature_gates": len(catalogs.feature_gates),
            "baseline": catalogs.modules.baseline_id,
            "active_sessions": len(store),
        }

    return app


def create_app_from_env() -> FastAPI:
    """Load .env, configure logging and build the app."""
    load_dotenv()
    config = PlanEngineConfig.from_env()
    configure_logging(config.log_level, config.log_format)
    app = create_app(config)
    logger.info("IRH Plan Engine API started")
    return app
