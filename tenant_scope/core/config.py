# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
TenantScope Configuration — Environment-driven settings.

All configuration is loaded from environment variables (or .env file).
"""

from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic import Field


class TenancySettings(BaseSettings):
    """Tenancy engine configuration loaded from environment."""

    # --- Database ---
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./tenant_scope.db",
        description="SQLAlchemy async connection URL",
    )

    # --- Resolution ---
    TENANCY_MAX_INHERIT_DEPTH: int = Field(
        default=16,
        ge=1,
        description="Max parent hops followed while resolving an inherit model",
    )

    # --- Request headers (tenant resolution collaborator) ---
    TENANCY_OWNER_HEADER: str = Field(default="X-Tenant-Owner-Id")
    TENANCY_CREATOR_HEADER: str = Field(default="X-Tenant-Creator-Id")
    TENANCY_USER_HEADER: str = Field(default="X-User-Id")
    TENANCY_SECURITY_MODEL_HEADER: str = Field(
        default="X-Tenant-Security-Model",
        description="Optional header carrying an already-resolved sharing policy",
    )
    TENANCY_TRUST_SECURITY_MODEL_HEADER: bool = Field(
        default=False,
        description="Honor the security model header; enable only behind a gateway that sets it",
    )

    # --- Platform ---
    LOG_LEVEL: str = Field(default="INFO")
    TENANCY_ENV: str = Field(
        default="dev",
        description="Environment: dev | prod",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


# Global singleton
settings = TenancySettings()
