"""
IRH Plan Engine Configuration
=============================

Single source of truth for service configuration values.
Reads from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from typing import List


@dataclass
class PlanEngineConfig:
    """Configuration for the plan engine service."""

    # Catalog
    catalog_path: str = ""  # empty = packaged default catalog

    # Sessions
    max_sessions: int = 10000
    session_rate_limit: str = "30/minute"

    # Server
    host: str = "0.0.0.0"
    port: int = 8010
    log_level: str = "INFO"
    log_format: str = "json"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    @property
    def uses_default_catalog(self) -> bool:
        return not self.catalog_path

    @classmethod
    def from_env(cls) -> "PlanEngineConfig":
        """Load configuration from environment variables."""
        return cls(
            catalog_path=os.environ.get("PLAN_CATALOG_PATH", ""),
            max_sessions=int(os.environ.get("PLAN_MAX_SESSIONS", "10000")),
            session_rate_limit=os.environ.get("PLAN_SESSION_RATE_LIMIT", "30/minute"),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "8010")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "json"),
            cors_origins=[
                origin.strip()
                for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
                if origin.strip()
            ],
        )
