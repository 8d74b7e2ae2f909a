# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Security Model Resolver — Turns ``inherit`` into a terminal model.

Walks the participant hierarchy upward until a non-inherit model is
found. Missing parents, cycles and chains longer than
TENANCY_MAX_INHERIT_DEPTH fall back to ``closed`` and are logged, since
they point at broken hierarchy data.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Set

from tenant_scope.core.config import settings
from tenant_scope.core.logging import tenant_log_extra
from tenant_scope.core.metrics import tenancy_metrics
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.participant import TenantParticipant
from tenant_scope.tenancy.ports import ParticipantStore
from tenant_scope.tenancy.security_model import (
    DEFAULT_SECURITY_MODEL,
    SecurityModel,
    is_inherit,
    participant_tag,
)

logger = logging.getLogger("tenancy.resolver")

INHERIT = SecurityModel.INHERIT.value


class SecurityModelResolver:
    """Read-only traversal of the participant hierarchy."""

    def __init__(self, store: ParticipantStore, max_depth: Optional[int] = None) -> None:
        self._store = store
        if max_depth is None:
            max_depth = settings.TENANCY_MAX_INHERIT_DEPTH
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    async def resolve(self, participant: TenantParticipant) -> str:
        """Return the effective (non-inherit) model tag of a participant."""
        current = participant
        visited: Set[str] = set()
        hops = 0

        while True:
            tag = participant_tag(current.security_model)
            if tag != INHERIT:
                return tag

            if current.id is not None:
                visited.add(current.id)

            parent_id = current.parent_id
            if parent_id is None:
                return self._fallback(participant, "root participant inherits")
            if parent_id in visited:
                return self._fallback(participant, f"cycle at {parent_id!r}")

            hops += 1
            if hops > self._max_depth:
                return self._fallback(participant, f"chain exceeds {self._max_depth} hops")

            parent = await self._store.lookup(parent_id)
            if parent is None:
                return self._fallback(participant, f"parent {parent_id!r} not found")
            current = parent

    async def resolve_context(self, context: Optional[TenantContext]) -> str:
        """
        Effective model for a tenant context, cached on the context.

        Order: cached value, the declared non-inherit model carried by the
        context, then the creator participant (or the owner when the
        creator is not a known participant).
        """
        if context is None or context.is_null:
            return DEFAULT_SECURITY_MODEL

        cached = context.effective_security_model
        if cached is not None:
            return cached

        declared = context.security_model
        if declared is not None and not is_inherit(declared):
            tag = declared
        else:
            start = time.perf_counter()
            participant = await self._participant_for(context)
            if participant is None:
                logger.warning(
                    "No participant found for %r, falling back to %s",
                    context, DEFAULT_SECURITY_MODEL,
                    extra=tenant_log_extra(context),
                )
                _count_fallback()
                tag = DEFAULT_SECURITY_MODEL
            else:
                tag = await self.resolve(participant)
            tenancy_metrics.observe(
                "resolver.resolve_ms", (time.perf_counter() - start) * 1000,
            )

        context.cache_effective_model(tag)
        return tag

    async def _participant_for(self, context: TenantContext) -> Optional[TenantParticipant]:
        if context.creator is not None:
            return context.creator
        creator = await self._store.lookup(context.creator_id)
        if creator is not None:
            return creator
        if context.owner is not None:
            return context.owner
        if context.owner_id != context.creator_id:
            return await self._store.lookup(context.owner_id)
        return None

    def _fallback(self, participant: TenantParticipant, reason: str) -> str:
        logger.warning(
            "Unresolved inherit for participant %r (%s), falling back to %s",
            participant.id, reason, DEFAULT_SECURITY_MODEL,
        )
        _count_fallback()
        return DEFAULT_SECURITY_MODEL


def _count_fallback() -> None:
    tenancy_metrics.inc("resolver.fallback_closed")
