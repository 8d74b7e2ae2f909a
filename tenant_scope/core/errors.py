# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Tenancy Errors — Typed failures raised by the scoping engine.

Only caller errors are raised. Incomplete hierarchy or membership data is
absorbed into the least-privilege default and logged instead.
"""

from __future__ import annotations

from typing import Any, Optional


class TenancyError(Exception):
    """Base class for all tenancy engine errors."""

    code: str = "TENANCY_ERROR"


class UnresolvableModelError(TenancyError):
    """An effective security model has no registered predicate builder."""

    code = "UNRESOLVABLE_SECURITY_MODEL"

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"No predicate builder registered for security model '{tag}'")


class TenancyStampError(TenancyError):
    """A tenant-aware record was stamped illegally."""

    code = "TENANCY_STAMP_ERROR"

    def __init__(self, message: str, record: Optional[Any] = None):
        self.record = record
        super().__init__(message)


class RecordOutOfScopeError(TenancyError):
    """A write targeted a record the current tenant cannot see."""

    code = "RECORD_OUT_OF_SCOPE"
