# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Repository Layer — Hierarchy access and tenant-scoped record access.

Each repository takes an AsyncSession (one unit of work).
``TenantScopedRepository`` has exactly the surface of ``Repository``; the
only difference is that every statement passes through the ScopeEnforcer
before it executes.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Optional, Set, Type, TypeVar

from sqlalchemy import Select, delete, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_scope.core.errors import RecordOutOfScopeError
from tenant_scope.core.logging import tenant_log_extra
from tenant_scope.storage.models import TenantParticipantRecord, UserTenantMembership
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.enforcer import ScopeEnforcer
from tenant_scope.tenancy.security_model import SecurityModelTag, normalize_tag

logger = logging.getLogger("tenancy.repository")

T = TypeVar("T")


# ── Participant Repository ──────────────────────────────────

class ParticipantRepository:
    """Participant store backed by the tenant_participants table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lookup(self, participant_id: str) -> Optional[TenantParticipantRecord]:
        if participant_id is None:
            return None
        return await self.db.get(TenantParticipantRecord, participant_id)

    async def create(
        self,
        participant_id: str,
        name: str,
        security_model: SecurityModelTag = "inherit",
        parent_id: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> TenantParticipantRecord:
        """Create a participant. Administrative use; the engine never writes here."""
        record = TenantParticipantRecord(
            id=participant_id,
            name=name,
            security_model=normalize_tag(security_model),
            parent_id=parent_id,
            domain=domain,
        )
        self.db.add(record)
        await self.db.flush()
        return record

    async def find_by_domain(self, domain: str) -> Optional[TenantParticipantRecord]:
        result = await self.db.execute(
            select(TenantParticipantRecord).where(TenantParticipantRecord.domain == domain)
        )
        return result.scalar_one_or_none()

    async def list_children(self, parent_id: str) -> List[TenantParticipantRecord]:
        result = await self.db.execute(
            select(TenantParticipantRecord)
            .where(TenantParticipantRecord.parent_id == parent_id)
            .order_by(TenantParticipantRecord.id)
        )
        return list(result.scalars().all())

    async def list_owners(self) -> List[TenantParticipantRecord]:
        result = await self.db.execute(
            select(TenantParticipantRecord)
            .where(TenantParticipantRecord.parent_id.is_(None))
            .order_by(TenantParticipantRecord.id)
        )
        return list(result.scalars().all())


# ── Membership Repository ───────────────────────────────────

class MembershipRepository:
    """Membership provider backed by the tenant_user_memberships table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def grant(self, user_id: str, owner_id: str, creator_id: str) -> None:
        existing = await self.db.get(UserTenantMembership, (user_id, owner_id, creator_id))
        if existing is None:
            self.db.add(UserTenantMembership(
                user_id=user_id, owner_id=owner_id, creator_id=creator_id,
            ))
            await self.db.flush()

    async def revoke(self, user_id: str, owner_id: str, creator_id: str) -> None:
        await self.db.execute(
            delete(UserTenantMembership).where(
                UserTenantMembership.user_id == user_id,
                UserTenantMembership.owner_id == owner_id,
                UserTenantMembership.creator_id == creator_id,
            )
        )

    async def accessible_creator_ids(self, context: TenantContext) -> Set[str]:
        if context is None or context.is_null or context.user_id is None:
            return set()
        result = await self.db.execute(
            select(UserTenantMembership.creator_id).where(
                UserTenantMembership.user_id == context.user_id,
                UserTenantMembership.owner_id == context.owner_id,
            )
        )
        return set(result.scalars().all())


# ── Record Repositories ─────────────────────────────────────

class Repository(Generic[T]):
    """
    Unscoped data accessor for one mapped entity.

    Custom finders build on ``select()`` and run through ``_all`` /
    ``_one`` so subclasses of the scoped variant inherit the scoping.
    """

    def __init__(self, db: AsyncSession, entity: Type[T]):
        self.db = db
        self.entity = entity
        mapper = inspect(entity)
        self._pk = mapper.primary_key[0]
        self._pk_attr = mapper.get_property_by_column(self._pk).key

    def select(self) -> Select:
        return select(self.entity)

    async def _prepare(self, stmt: Select) -> Select:
        return stmt

    async def _all(self, stmt: Select) -> List[T]:
        result = await self.db.execute(await self._prepare(stmt))
        return list(result.scalars().all())

    async def _one(self, stmt: Select) -> Optional[T]:
        result = await self.db.execute(await self._prepare(stmt))
        return result.scalars().first()

    def _filtered(self, filters: dict) -> Select:
        stmt = self.select()
        for column, value in filters.items():
            stmt = stmt.where(getattr(self.entity, column) == value)
        return stmt

    async def get(self, record_id: Any) -> Optional[T]:
        """Get a record by primary key."""
        return await self._one(self.select().where(self._pk == record_id))

    async def list_all(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: Any = None,
    ) -> List[T]:
        stmt = self.select().order_by(order_by if order_by is not None else self._pk)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._all(stmt)

    async def find_by(self, **filters: Any) -> List[T]:
        return await self._all(self._filtered(filters).order_by(self._pk))

    async def find_one_by(self, **filters: Any) -> Optional[T]:
        return await self._one(self._filtered(filters).order_by(self._pk))

    async def count(self, **filters: Any) -> int:
        stmt = select(func.count()).select_from(self.entity)
        for column, value in filters.items():
            stmt = stmt.where(getattr(self.entity, column) == value)
        result = await self.db.execute(await self._prepare(stmt))
        return result.scalar_one()

    async def add(self, record: T) -> T:
        self.db.add(record)
        await self.db.flush()
        return record

    async def delete(self, record: T) -> None:
        await self.db.delete(record)
        await self.db.flush()


class TenantScopedRepository(Repository[T]):
    """
    Tenant-aware data accessor.

    Reads only ever return rows the context may see; new records are
    stamped from the context before their first flush.
    """

    def __init__(
        self,
        db: AsyncSession,
        entity: Type[T],
        context: Optional[TenantContext],
        enforcer: ScopeEnforcer,
    ):
        super().__init__(db, entity)
        self.context = context if context is not None else TenantContext.null()
        self.enforcer = enforcer

    async def _prepare(self, stmt: Select) -> Select:
        return await self.enforcer.scope(stmt, self.context, self.entity)

    async def add(self, record: T) -> T:
        # A pre-set stamp must match the context; the mixin raises otherwise.
        record.import_tenancy_from(self.context)
        return await super().add(record)

    async def delete(self, record: T) -> None:
        visible = await self.get(getattr(record, self._pk_attr))
        if visible is None:
            logger.warning(
                "Refused delete of %r outside tenant scope", record,
                extra=tenant_log_extra(self.context),
            )
            raise RecordOutOfScopeError(f"{record!r} is outside the current tenant scope")
        await super().delete(record)
