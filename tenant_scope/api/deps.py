# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
API Dependencies — FastAPI dependency injection.

The tenant ids arrive already resolved (by a gateway, an auth layer or a
session); this module only maps headers onto a TenantContext. A request
without owner id is served as the Null Tenant, never unscoped.
"""

from __future__ import annotations

from typing import Mapping, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_scope.core.config import settings
from tenant_scope.storage.database import get_db
from tenant_scope.storage.repositories import MembershipRepository, ParticipantRepository
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.enforcer import PredicateBuilder, ScopeEnforcer, SecurityModelRegistry
from tenant_scope.tenancy.resolver import SecurityModelResolver
from tenant_scope.tenancy.security_model import SecurityModelTag

# Extension models registered at startup, applied to every request's enforcer.
security_model_extensions = SecurityModelRegistry()


def register_security_model(tag: SecurityModelTag, builder: PredicateBuilder) -> None:
    security_model_extensions.register(tag, builder)


def build_tenant_context(
    owner_id: Optional[str],
    creator_id: Optional[str] = None,
    user_id: Optional[str] = None,
    security_model: Optional[str] = None,
) -> TenantContext:
    """Map raw identifiers onto a context; raises ValueError on bad combinations."""
    if not owner_id:
        if creator_id:
            raise ValueError("creator id given without owner id")
        return TenantContext.null()
    return TenantContext(
        owner_id=owner_id,
        creator_id=creator_id or None,
        user_id=user_id or None,
        security_model=security_model or None,
    )


def _trusted_model(value: Optional[str]) -> Optional[str]:
    # A declared model overrides the stored one, so clients may not pick it.
    return value if settings.TENANCY_TRUST_SECURITY_MODEL_HEADER else None


def context_from_headers(headers: Mapping[str, str]) -> TenantContext:
    return build_tenant_context(
        owner_id=headers.get(settings.TENANCY_OWNER_HEADER),
        creator_id=headers.get(settings.TENANCY_CREATOR_HEADER),
        user_id=headers.get(settings.TENANCY_USER_HEADER),
        security_model=_trusted_model(headers.get(settings.TENANCY_SECURITY_MODEL_HEADER)),
    )


async def get_tenant_context(
    x_tenant_owner_id: Optional[str] = Header(None, alias=settings.TENANCY_OWNER_HEADER),
    x_tenant_creator_id: Optional[str] = Header(None, alias=settings.TENANCY_CREATOR_HEADER),
    x_user_id: Optional[str] = Header(None, alias=settings.TENANCY_USER_HEADER),
    x_tenant_security_model: Optional[str] = Header(
        None, alias=settings.TENANCY_SECURITY_MODEL_HEADER,
    ),
) -> TenantContext:
    """Extract the tenant context from request headers."""
    try:
        return build_tenant_context(
            x_tenant_owner_id, x_tenant_creator_id, x_user_id,
            _trusted_model(x_tenant_security_model),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


async def get_tenant_context_from_state(request: Request) -> TenantContext:
    """Context bound by TenantContextMiddleware (Null Tenant when absent)."""
    ctx = getattr(request.state, "tenant", None)
    return ctx if ctx is not None else TenantContext.null()


async def get_scope_enforcer(db: AsyncSession = Depends(get_db)) -> ScopeEnforcer:
    """Request-scoped enforcer over the request's database session."""
    return ScopeEnforcer(
        SecurityModelResolver(ParticipantRepository(db)),
        membership=MembershipRepository(db),
        extensions=security_model_extensions,
    )
