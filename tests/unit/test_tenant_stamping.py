# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.
"""Unit tests for TenantAwareMixin stamping."""

import pytest

from conftest import Document
from tenant_scope.core.errors import TenancyStampError
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.ports import TenantAware


class TestTenantStamping:
    def test_import_tenancy_from(self):
        doc = Document(title="a")
        assert not doc.is_tenancy_stamped
        doc.import_tenancy_from(TenantContext(owner_id="o1", creator_id="c1"))
        assert doc.tenant_owner_id == "o1"
        assert doc.tenant_creator_id == "c1"
        assert doc.is_tenancy_stamped

    def test_record_is_tenant_aware(self):
        assert isinstance(Document(title="a"), TenantAware)

    def test_restamp_same_ids_is_allowed(self):
        doc = Document(title="a")
        ctx = TenantContext(owner_id="o1", creator_id="c1")
        doc.import_tenancy_from(ctx)
        doc.import_tenancy_from(ctx)
        assert doc.tenant_creator_id == "c1"

    def test_restamp_other_tenant_raises(self):
        doc = Document(title="a")
        doc.import_tenancy_from(TenantContext(owner_id="o1", creator_id="c1"))
        with pytest.raises(TenancyStampError, match="already stamped"):
            doc.import_tenancy_from(TenantContext(owner_id="o2", creator_id="c2"))

    def test_direct_overwrite_raises(self):
        doc = Document(title="a", tenant_owner_id="o1", tenant_creator_id="c1")
        with pytest.raises(TenancyStampError):
            doc.tenant_creator_id = "c2"

    def test_null_tenant_cannot_stamp(self):
        with pytest.raises(TenancyStampError, match="null tenant"):
            Document(title="a").import_tenancy_from(TenantContext.null())
