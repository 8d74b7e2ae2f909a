# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Tenant Context — The "who is acting" value for one unit of work.

A context is built once per request/job by the tenant resolution
collaborator and passed to every scoped data access. The effective
security model is resolved lazily and cached on the instance, so the
cache never outlives the unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from tenant_scope.tenancy.participant import NULL_TENANT, TenantParticipant
from tenant_scope.tenancy.security_model import SecurityModelTag, normalize_tag

# Fields the resolved model depends on.
_IDENTITY_FIELDS = frozenset(
    {"owner_id", "creator_id", "user_id", "security_model", "owner", "creator"}
)


@dataclass
class TenantContext:
    """Request-scoped tenant identity."""

    owner_id: Optional[str] = None
    creator_id: Optional[str] = None
    user_id: Optional[str] = None
    security_model: Optional[SecurityModelTag] = None
    owner: Optional[TenantParticipant] = field(default=None, repr=False, compare=False)
    creator: Optional[TenantParticipant] = field(default=None, repr=False, compare=False)
    _effective_security_model: Optional[str] = field(
        default=None, init=False, repr=False, compare=False,
    )

    def __post_init__(self):
        if self.owner is not None and self.owner_id is None:
            self.owner_id = self.owner.id
        if self.creator is not None and self.creator_id is None:
            self.creator_id = self.creator.id
        if self.creator_id and not self.owner_id:
            raise ValueError("owner_id must not be empty when creator_id is set")
        # An owner acting on its own behalf is also the creator
        if self.owner_id and not self.creator_id:
            self.creator_id = self.owner_id
            if self.creator is None:
                self.creator = self.owner

    def __setattr__(self, name, value):
        if name == "security_model" and value is not None:
            value = normalize_tag(value)
        super().__setattr__(name, value)
        if name in _IDENTITY_FIELDS:
            super().__setattr__("_effective_security_model", None)

    # ── Constructors ────────────────────────────────────────────

    @classmethod
    def null(cls) -> "TenantContext":
        """Context of the Null Tenant: grants no visibility at all."""
        return cls(owner=NULL_TENANT, creator=NULL_TENANT)

    @classmethod
    def from_participants(
        cls,
        owner: TenantParticipant,
        creator: Optional[TenantParticipant] = None,
        user_id: Optional[str] = None,
    ) -> "TenantContext":
        return cls(owner=owner, creator=creator or owner, user_id=user_id)

    # ── Accessors ───────────────────────────────────────────────

    @property
    def is_null(self) -> bool:
        return self.owner_id is None

    @property
    def effective_security_model(self) -> Optional[str]:
        """Resolved terminal model, or None until the resolver ran."""
        return self._effective_security_model

    def cache_effective_model(self, tag: str) -> None:
        self._effective_security_model = tag

    def __repr__(self) -> str:
        if self.is_null:
            return "TenantContext(<null tenant>)"
        return (
            f"TenantContext(owner={self.owner_id!r}, creator={self.creator_id!r}, "
            f"user={self.user_id!r})"
        )
