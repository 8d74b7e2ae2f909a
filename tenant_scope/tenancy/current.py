# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Current Tenant — Per-unit-of-work holder for code that cannot take the
context as a parameter.

Backed by a ContextVar, so every asyncio task and every request sees its
own value. Unbound lookups return the Null Tenant context.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

from tenant_scope.tenancy.context import TenantContext

_current_tenant: ContextVar[Optional[TenantContext]] = ContextVar(
    "tenant_scope_current_tenant", default=None,
)


def get_current_tenant() -> TenantContext:
    ctx = _current_tenant.get()
    return ctx if ctx is not None else TenantContext.null()


def set_current_tenant(context: Optional[TenantContext]) -> Token:
    return _current_tenant.set(context)


def reset_current_tenant(token: Token) -> None:
    _current_tenant.reset(token)


@contextmanager
def use_tenant(context: Optional[TenantContext]) -> Iterator[TenantContext]:
    """Bind ``context`` as current tenant for the duration of the block."""
    token = set_current_tenant(context)
    try:
        yield get_current_tenant()
    finally:
        reset_current_tenant(token)
