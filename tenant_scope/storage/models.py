# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
ORM Models — Tenant hierarchy tables and the tenant-aware record mixin.

Tables:
  - tenant_participants: owner and creator nodes with their security model
  - tenant_user_memberships: creators a user may see under an owner

Tenant-aware records keep tenant_owner_id / tenant_creator_id as plain
scalar columns without foreign keys, so tenant data may live in a
different store than the records themselves.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.orm import validates

from tenant_scope.core.errors import TenancyStampError
from tenant_scope.storage.database import Base
from tenant_scope.tenancy.security_model import SecurityModel


def _utcnow():
    return datetime.now(timezone.utc)


# ── Tenant Participants ─────────────────────────────────────

class TenantParticipantRecord(Base):
    __tablename__ = "tenant_participants"

    id = Column(String(64), primary_key=True)
    name = Column(String(256), nullable=False)
    domain = Column(String(255), nullable=True, unique=True)
    security_model = Column(String(32), nullable=False, default=SecurityModel.INHERIT.value)
    parent_id = Column(String(64), nullable=True, index=True)  # null: root owner
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    @property
    def is_owner(self) -> bool:
        return self.parent_id is None

    def __repr__(self):
        return f"<Participant {self.id} model={self.security_model} parent={self.parent_id}>"


# ── User Memberships ────────────────────────────────────────

class UserTenantMembership(Base):
    __tablename__ = "tenant_user_memberships"

    user_id = Column(String(64), primary_key=True)
    owner_id = Column(String(64), primary_key=True)
    creator_id = Column(String(64), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_memberships_user_owner", "user_id", "owner_id"),
    )

    def __repr__(self):
        return f"<Membership user={self.user_id} {self.owner_id}/{self.creator_id}>"


# ── Tenant-aware mixin ──────────────────────────────────────

class TenantAwareMixin:
    """
    Adds the tenant stamp to a mapped class.

    The ids are written once, when the record is first persisted. Any later
    attempt to change them to a different value raises TenancyStampError.
    """

    tenant_owner_id = Column(String(64), nullable=True, index=True)
    tenant_creator_id = Column(String(64), nullable=True, index=True)

    @validates("tenant_owner_id", "tenant_creator_id")
    def _guard_tenant_stamp(self, key, value):
        current = getattr(self, key)
        if current is not None and value != current:
            raise TenancyStampError(
                f"{key} of {self!r} is already stamped with {current!r}", record=self,
            )
        return value

    @property
    def is_tenancy_stamped(self) -> bool:
        return self.tenant_owner_id is not None

    def import_tenancy_from(self, context) -> None:
        """Copy owner/creator ids from the active tenant context."""
        if context is None or context.is_null:
            raise TenancyStampError("Cannot stamp a record from the null tenant", record=self)
        self.tenant_owner_id = context.owner_id
        self.tenant_creator_id = context.creator_id
