# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Template Helpers — Current-tenant functions for template globals.

    env.globals.update(tenant_template_globals())

Without an explicit context the helpers read the current tenant at call
time, so one environment can serve concurrent requests.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.current import get_current_tenant
from tenant_scope.tenancy.participant import NULL_TENANT


def tenant_template_globals(context: Optional[TenantContext] = None) -> Dict[str, Callable[[], Any]]:
    def _ctx() -> TenantContext:
        return context if context is not None else get_current_tenant()

    def current_tenant_owner():
        ctx = _ctx()
        if ctx.owner is not None:
            return ctx.owner
        return NULL_TENANT if ctx.is_null else None

    def current_tenant_creator():
        ctx = _ctx()
        if ctx.creator is not None:
            return ctx.creator
        return NULL_TENANT if ctx.is_null else None

    def current_tenant_security_model():
        ctx = _ctx()
        return ctx.effective_security_model or ctx.security_model

    return {
        "current_tenant_owner_id": lambda: _ctx().owner_id,
        "current_tenant_creator_id": lambda: _ctx().creator_id,
        "current_tenant_owner": current_tenant_owner,
        "current_tenant_creator": current_tenant_creator,
        "current_tenant_security_model": current_tenant_security_model,
    }
