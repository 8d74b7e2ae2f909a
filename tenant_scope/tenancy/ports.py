# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Ports — Collaborator interfaces consumed by the tenancy engine.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, runtime_checkable

from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.participant import TenantParticipant


@runtime_checkable
class ParticipantStore(Protocol):
    """Read access to the participant hierarchy."""

    async def lookup(self, participant_id: str) -> Optional[TenantParticipant]:
        ...


@runtime_checkable
class MembershipProvider(Protocol):
    """Creators the acting user may see within the context's owner."""

    async def accessible_creator_ids(self, context: TenantContext) -> Optional[Iterable[str]]:
        ...


@runtime_checkable
class TenantAware(Protocol):
    """Record carrying the owner/creator ids it was created under."""

    tenant_owner_id: Optional[str]
    tenant_creator_id: Optional[str]

    def import_tenancy_from(self, context: TenantContext) -> None:
        ...
