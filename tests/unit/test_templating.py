# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.
"""Unit tests for template helper functions."""

from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.current import use_tenant
from tenant_scope.tenancy.participant import NULL_TENANT, Participant
from tenant_scope.tenancy.templating import tenant_template_globals


class TestTenantTemplateGlobals:
    def test_function_names(self):
        assert set(tenant_template_globals()) == {
            "current_tenant_owner_id",
            "current_tenant_creator_id",
            "current_tenant_owner",
            "current_tenant_creator",
            "current_tenant_security_model",
        }

    def test_explicit_context(self):
        owner = Participant(id="o1", name="Owner")
        creator = Participant(id="c1", name="Creator", parent_id="o1")
        ctx = TenantContext.from_participants(owner, creator)
        ctx.cache_effective_model("closed")
        helpers = tenant_template_globals(ctx)
        assert helpers["current_tenant_owner_id"]() == "o1"
        assert helpers["current_tenant_creator_id"]() == "c1"
        assert helpers["current_tenant_owner"]() is owner
        assert helpers["current_tenant_creator"]() is creator
        assert helpers["current_tenant_security_model"]() == "closed"

    def test_declared_model_before_resolution(self):
        helpers = tenant_template_globals(TenantContext(owner_id="o1", security_model="shared"))
        assert helpers["current_tenant_security_model"]() == "shared"

    def test_reads_current_tenant_at_call_time(self):
        helpers = tenant_template_globals()
        assert helpers["current_tenant_owner_id"]() is None
        assert helpers["current_tenant_owner"]() is NULL_TENANT
        with use_tenant(TenantContext(owner_id="o7", creator_id="c7")):
            assert helpers["current_tenant_owner_id"]() == "o7"
            assert helpers["current_tenant_creator_id"]() == "c7"
            assert helpers["current_tenant_owner"]() is None
