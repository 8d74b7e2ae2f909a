# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.
"""Unit tests for SecurityModelResolver."""

import logging

import pytest

from conftest import MockParticipantStore
from tenant_scope.core.config import settings
from tenant_scope.core.metrics import tenancy_metrics
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.participant import NULL_TENANT, Participant
from tenant_scope.tenancy.resolver import SecurityModelResolver


class TestResolve:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("model", ["shared", "user", "closed", "global"])
    async def test_non_inherit_returned_directly(self, model):
        resolver = SecurityModelResolver(MockParticipantStore())
        p = Participant(id="p", name="P", security_model=model, parent_id="missing")
        assert await resolver.resolve(p) == model

    @pytest.mark.asyncio
    async def test_non_inherit_does_not_touch_store(self, hierarchy, resolver):
        await resolver.resolve(hierarchy.participants["c1"])
        assert hierarchy.lookups == []

    @pytest.mark.asyncio
    async def test_inherit_from_parent(self, hierarchy, resolver):
        assert await resolver.resolve(hierarchy.participants["c3"]) == "shared"
        assert await resolver.resolve(hierarchy.participants["c4"]) == "closed"

    @pytest.mark.asyncio
    async def test_two_level_inherit_chain(self):
        store = MockParticipantStore(
            Participant(id="p1", name="P1", security_model="inherit", parent_id="p2"),
            Participant(id="p2", name="P2", security_model="inherit", parent_id="p3"),
            Participant(id="p3", name="P3", security_model="shared"),
        )
        resolver = SecurityModelResolver(store)
        assert await resolver.resolve(store.participants["p1"]) == "shared"

    @pytest.mark.asyncio
    async def test_missing_parent_falls_back_to_closed(self, caplog):
        store = MockParticipantStore(
            Participant(id="p1", name="P1", security_model="inherit", parent_id="gone"),
        )
        resolver = SecurityModelResolver(store)
        with caplog.at_level(logging.WARNING, logger="tenancy.resolver"):
            assert await resolver.resolve(store.participants["p1"]) == "closed"
        assert "not found" in caplog.text
        assert tenancy_metrics.get_counter("resolver.fallback_closed") == 1

    @pytest.mark.asyncio
    async def test_root_inherit_falls_back_to_closed(self):
        store = MockParticipantStore(Participant(id="p1", name="P1", security_model="inherit"))
        resolver = SecurityModelResolver(store)
        assert await resolver.resolve(store.participants["p1"]) == "closed"

    @pytest.mark.asyncio
    async def test_inherit_parent_without_further_parent(self):
        store = MockParticipantStore(
            Participant(id="p1", name="P1", security_model="inherit", parent_id="p2"),
            Participant(id="p2", name="P2", security_model="inherit"),
        )
        resolver = SecurityModelResolver(store)
        assert await resolver.resolve(store.participants["p1"]) == "closed"

    @pytest.mark.asyncio
    async def test_cycle_falls_back_to_closed(self, caplog):
        store = MockParticipantStore(
            Participant(id="a", name="A", security_model="inherit", parent_id="b"),
            Participant(id="b", name="B", security_model="inherit", parent_id="a"),
        )
        resolver = SecurityModelResolver(store)
        with caplog.at_level(logging.WARNING, logger="tenancy.resolver"):
            assert await resolver.resolve(store.participants["a"]) == "closed"
        assert "cycle" in caplog.text

    @pytest.mark.asyncio
    async def test_self_parent_is_a_cycle(self):
        store = MockParticipantStore(
            Participant(id="a", name="A", security_model="inherit", parent_id="a"),
        )
        resolver = SecurityModelResolver(store)
        assert await resolver.resolve(store.participants["a"]) == "closed"

    @pytest.mark.asyncio
    async def test_depth_bound(self):
        chain = [
            Participant(id=f"p{i}", name=f"P{i}", security_model="inherit", parent_id=f"p{i + 1}")
            for i in range(10)
        ]
        store = MockParticipantStore(*chain, Participant(id="p10", name="P10", security_model="shared"))
        assert await SecurityModelResolver(store, max_depth=3).resolve(chain[0]) == "closed"
        assert await SecurityModelResolver(store, max_depth=10).resolve(chain[0]) == "shared"

    @pytest.mark.asyncio
    async def test_zero_depth_follows_no_parent(self, hierarchy):
        resolver = SecurityModelResolver(hierarchy, max_depth=0)
        assert resolver.max_depth == 0
        assert await resolver.resolve(hierarchy.participants["c3"]) == "closed"
        assert await resolver.resolve(hierarchy.participants["c2"]) == "shared"
        assert hierarchy.lookups == []

    def test_default_depth_from_settings(self, hierarchy):
        assert SecurityModelResolver(hierarchy).max_depth == settings.TENANCY_MAX_INHERIT_DEPTH

    @pytest.mark.asyncio
    async def test_unset_model_inherits(self):
        store = MockParticipantStore(
            Participant(id="o", name="O", security_model="user"),
            Participant(id="c", name="C", security_model=None, parent_id="o"),
        )
        assert await SecurityModelResolver(store).resolve(store.participants["c"]) == "user"

    @pytest.mark.asyncio
    async def test_null_tenant_resolves_closed(self, resolver):
        assert await resolver.resolve(NULL_TENANT) == "closed"

    @pytest.mark.asyncio
    async def test_same_input_same_output(self, hierarchy, resolver):
        first = await resolver.resolve(hierarchy.participants["c3"])
        second = await resolver.resolve(hierarchy.participants["c3"])
        assert first == second == "shared"


class TestResolveContext:
    @pytest.mark.asyncio
    async def test_creator_participant_used(self, resolver):
        ctx = TenantContext(owner_id="o1", creator_id="c1")
        assert await resolver.resolve_context(ctx) == "closed"

    @pytest.mark.asyncio
    async def test_creator_inherits_owner_model(self, resolver):
        ctx = TenantContext(owner_id="o1", creator_id="c3")
        assert await resolver.resolve_context(ctx) == "shared"

    @pytest.mark.asyncio
    async def test_owner_acting_alone(self, resolver):
        assert await resolver.resolve_context(TenantContext(owner_id="o2")) == "closed"

    @pytest.mark.asyncio
    async def test_unknown_creator_falls_back_to_owner(self, resolver):
        ctx = TenantContext(owner_id="o1", creator_id="unknown")
        assert await resolver.resolve_context(ctx) == "shared"

    @pytest.mark.asyncio
    async def test_unknown_participants_resolve_closed(self, resolver):
        ctx = TenantContext(owner_id="nobody", creator_id="nothing")
        assert await resolver.resolve_context(ctx) == "closed"
        assert tenancy_metrics.get_counter("resolver.fallback_closed") == 1

    @pytest.mark.asyncio
    async def test_declared_model_wins(self, hierarchy, resolver):
        ctx = TenantContext(owner_id="o1", creator_id="c1", security_model="shared")
        assert await resolver.resolve_context(ctx) == "shared"
        assert hierarchy.lookups == []

    @pytest.mark.asyncio
    async def test_declared_inherit_resolves_through_hierarchy(self, resolver):
        ctx = TenantContext(owner_id="o1", creator_id="c3", security_model="inherit")
        assert await resolver.resolve_context(ctx) == "shared"

    @pytest.mark.asyncio
    async def test_context_participants_skip_lookup(self, hierarchy, resolver):
        owner = hierarchy.participants["o1"]
        creator = hierarchy.participants["c2"]
        ctx = TenantContext.from_participants(owner, creator)
        assert await resolver.resolve_context(ctx) == "shared"
        assert hierarchy.lookups == []

    @pytest.mark.asyncio
    async def test_result_cached_on_context(self, hierarchy, resolver):
        ctx = TenantContext(owner_id="o1", creator_id="c3")
        await resolver.resolve_context(ctx)
        lookups = len(hierarchy.lookups)
        assert ctx.effective_security_model == "shared"
        await resolver.resolve_context(ctx)
        assert len(hierarchy.lookups) == lookups

    @pytest.mark.asyncio
    async def test_cache_is_per_context(self, hierarchy, resolver):
        first = TenantContext(owner_id="o1", creator_id="c3")
        await resolver.resolve_context(first)
        # Administrators change the owner's model between two requests
        hierarchy.add(Participant(id="o1", name="Owner One", security_model="closed"))
        second = TenantContext(owner_id="o1", creator_id="c3")
        assert await resolver.resolve_context(second) == "closed"
        assert first.effective_security_model == "shared"

    @pytest.mark.asyncio
    async def test_null_context(self, resolver):
        assert await resolver.resolve_context(TenantContext.null()) == "closed"
        assert await resolver.resolve_context(None) == "closed"
