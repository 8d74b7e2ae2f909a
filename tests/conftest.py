# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Shared test fixtures for all TenantScope tests.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set, Tuple

import pytest
import pytest_asyncio
from sqlalchemy import Column, Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tenant_scope.core.metrics import tenancy_metrics
from tenant_scope.storage.database import Base
from tenant_scope.storage.models import TenantAwareMixin
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.enforcer import ScopeEnforcer
from tenant_scope.tenancy.participant import Participant
from tenant_scope.tenancy.resolver import SecurityModelResolver

# Import models so tables are registered
import tenant_scope.storage.models  # noqa


# ── Tenant-aware entity used by the tests ─────────────────────


class Document(TenantAwareMixin, Base):
    __tablename__ = "test_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(128), nullable=False)
    kind = Column(String(32), nullable=False, default="note")

    def __repr__(self):
        return f"<Document {self.id} {self.title!r}>"


# ── Mock collaborators ────────────────────────────────────────


class MockParticipantStore:
    """In-memory participant hierarchy."""

    def __init__(self, *participants: Participant):
        self.participants: Dict[str, Participant] = {p.id: p for p in participants}
        self.lookups = []

    def add(self, participant: Participant) -> Participant:
        self.participants[participant.id] = participant
        return participant

    async def lookup(self, participant_id: str) -> Optional[Participant]:
        self.lookups.append(participant_id)
        return self.participants.get(participant_id)


class MockMembershipProvider:
    """In-memory (user, owner) → creators mapping."""

    def __init__(self, memberships: Optional[Dict[Tuple[str, str], Iterable[str]]] = None):
        self.memberships = {k: set(v) for k, v in (memberships or {}).items()}

    async def accessible_creator_ids(self, context: TenantContext) -> Optional[Set[str]]:
        return self.memberships.get((context.user_id, context.owner_id))


# ── Fixtures ──────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_metrics():
    tenancy_metrics.reset()
    yield
    tenancy_metrics.reset()


@pytest.fixture
def hierarchy() -> MockParticipantStore:
    """
    o1 (shared)
      ├── c1 (closed)
      ├── c2 (shared)
      └── c3 (inherit → shared)
    o2 (closed)
      └── c4 (inherit → closed)
    """
    return MockParticipantStore(
        Participant(id="o1", name="Owner One", security_model="shared", domain="one.example.com"),
        Participant(id="c1", name="Creator One", security_model="closed", parent_id="o1"),
        Participant(id="c2", name="Creator Two", security_model="shared", parent_id="o1"),
        Participant(id="c3", name="Creator Three", security_model="inherit", parent_id="o1"),
        Participant(id="o2", name="Owner Two", security_model="closed"),
        Participant(id="c4", name="Creator Four", security_model="inherit", parent_id="o2"),
    )


@pytest.fixture
def resolver(hierarchy) -> SecurityModelResolver:
    return SecurityModelResolver(hierarchy)


@pytest.fixture
def membership() -> MockMembershipProvider:
    return MockMembershipProvider({("u1", "o1"): {"c1", "c2"}})


@pytest.fixture
def enforcer(resolver, membership) -> ScopeEnforcer:
    return ScopeEnforcer(resolver, membership=membership)


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
