# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Tenant Participants — Nodes of the owner → creator hierarchy.

Anything exposing ``id``, ``name``, ``security_model``, ``parent_id`` and
``domain`` is a participant: the ORM row, the plain ``Participant`` value
below, or the ``NullTenant`` stand-in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from tenant_scope.tenancy.security_model import DEFAULT_SECURITY_MODEL


@runtime_checkable
class TenantParticipant(Protocol):
    """Capability of an owner or creator node."""

    id: Optional[str]
    name: str
    security_model: Optional[str]
    parent_id: Optional[str]
    domain: Optional[str]


@dataclass(frozen=True)
class Participant:
    """Detached, read-only participant value (e.g. loaded from a cache or API)."""

    id: str
    name: str
    security_model: Optional[str] = None
    parent_id: Optional[str] = None
    domain: Optional[str] = None

    @property
    def is_owner(self) -> bool:
        return self.parent_id is None


class NullTenant:
    """
    Participant used when no real tenant is resolved.

    Its id is absent, so no stored owner id ever equals it.
    """

    name = "Null Tenant"
    security_model = DEFAULT_SECURITY_MODEL

    @property
    def id(self) -> Optional[str]:
        return None

    @property
    def parent_id(self) -> Optional[str]:
        return None

    @property
    def domain(self) -> Optional[str]:
        return None

    @property
    def is_owner(self) -> bool:
        return True

    def __eq__(self, other) -> bool:
        return isinstance(other, NullTenant)

    def __hash__(self) -> int:
        return hash(NullTenant)

    def __repr__(self) -> str:
        return "NullTenant()"


NULL_TENANT = NullTenant()
