# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Scope Enforcer — Attaches the tenancy predicate to outgoing queries.

The effective security model of the context selects a predicate builder
from an open registry. Builders receive the entity's tenant columns and
the context and return a SQLAlchemy boolean expression (or an awaitable
of one when they need I/O, like the ``user`` model's membership lookup).

Built-in predicates:
  shared  tenant_owner_id = :owner
  user    tenant_owner_id = :owner AND tenant_creator_id IN (:accessible)
  closed  tenant_owner_id = :owner AND tenant_creator_id = :creator
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from sqlalchemy import Select, and_, false, or_
from sqlalchemy.sql.elements import ColumnElement

from tenant_scope.core.errors import UnresolvableModelError
from tenant_scope.core.logging import tenant_log_extra
from tenant_scope.core.metrics import tenancy_metrics
from tenant_scope.tenancy.context import TenantContext
from tenant_scope.tenancy.ports import MembershipProvider
from tenant_scope.tenancy.resolver import SecurityModelResolver
from tenant_scope.tenancy.security_model import (
    SecurityModel,
    SecurityModelTag,
    normalize_tag,
)

logger = logging.getLogger("tenancy.enforcer")


@dataclass(frozen=True)
class TenantColumns:
    """The two tenant columns of a tenant-aware entity (or an alias of it)."""

    owner: Any
    creator: Any

    @classmethod
    def for_entity(cls, entity: Any) -> "TenantColumns":
        try:
            return cls(owner=entity.tenant_owner_id, creator=entity.tenant_creator_id)
        except AttributeError:
            raise TypeError(
                f"{entity!r} is not tenant-aware: "
                "expected tenant_owner_id and tenant_creator_id columns"
            ) from None


Predicate = ColumnElement[bool]
PredicateBuilder = Callable[
    [TenantColumns, TenantContext],
    Union[Predicate, Awaitable[Predicate]],
]


# ── Built-in predicate builders ─────────────────────────────

def shared_predicate(columns: TenantColumns, context: TenantContext) -> Predicate:
    return columns.owner == context.owner_id


def closed_predicate(columns: TenantColumns, context: TenantContext) -> Predicate:
    return and_(
        columns.owner == context.owner_id,
        columns.creator == context.creator_id,
    )


def global_predicate(columns: TenantColumns, context: TenantContext) -> Predicate:
    """Owner's records plus records that belong to no owner at all (opt-in)."""
    return or_(columns.owner == context.owner_id, columns.owner.is_(None))


class UserPredicate:
    """Owner match restricted to the creators the acting user belongs to."""

    def __init__(self, membership: Optional[MembershipProvider] = None) -> None:
        self._membership = membership

    async def __call__(self, columns: TenantColumns, context: TenantContext) -> Predicate:
        creator_ids = None
        if self._membership is not None:
            creator_ids = await self._membership.accessible_creator_ids(context)
        accessible = sorted(set(creator_ids or ()))

        if not accessible:
            logger.info(
                "No accessible creators for %r, user model matches nothing",
                context, extra=tenant_log_extra(context),
            )
            return and_(columns.owner == context.owner_id, false())

        return and_(
            columns.owner == context.owner_id,
            columns.creator.in_(accessible),
        )


# ── Registry ────────────────────────────────────────────────

class SecurityModelRegistry:
    """Open mapping of model tag → predicate builder."""

    def __init__(self) -> None:
        self._builders: Dict[str, PredicateBuilder] = {}

    def register(self, tag: SecurityModelTag, builder: PredicateBuilder) -> None:
        key = normalize_tag(tag)
        if key == SecurityModel.INHERIT.value:
            raise ValueError("'inherit' is resolved through the hierarchy and cannot have a builder")
        if builder is None or not callable(builder):
            raise ValueError(f"Security model '{key}' needs a callable predicate builder")
        self._builders[key] = builder
        logger.debug("Registered security model: %s", key)

    def unregister(self, tag: SecurityModelTag) -> None:
        self._builders.pop(normalize_tag(tag), None)

    def get(self, tag: SecurityModelTag) -> PredicateBuilder:
        key = normalize_tag(tag)
        builder = self._builders.get(key)
        if builder is None:
            raise UnresolvableModelError(key)
        return builder

    def tags(self) -> List[str]:
        return sorted(self._builders)

    def items(self):
        return list(self._builders.items())

    def __contains__(self, tag: SecurityModelTag) -> bool:
        return normalize_tag(tag) in self._builders

    def __len__(self) -> int:
        return len(self._builders)


def default_registry(
    membership: Optional[MembershipProvider] = None,
    extensions: Optional[SecurityModelRegistry] = None,
) -> SecurityModelRegistry:
    """Registry holding the shared, user and closed models plus ``extensions``."""
    registry = SecurityModelRegistry()
    registry.register(SecurityModel.SHARED, shared_predicate)
    registry.register(SecurityModel.USER, UserPredicate(membership))
    registry.register(SecurityModel.CLOSED, closed_predicate)
    if extensions is not None:
        for tag, builder in extensions.items():
            registry.register(tag, builder)
    return registry


# ── Enforcer ────────────────────────────────────────────────

class ScopeEnforcer:
    """
    Applies the tenancy predicate for a context to SQLAlchemy statements.

    A statement is never returned unfiltered: a context without owner gets
    a predicate that matches nothing, and a model without builder raises
    UnresolvableModelError before anything executes.
    """

    def __init__(
        self,
        resolver: SecurityModelResolver,
        membership: Optional[MembershipProvider] = None,
        registry: Optional[SecurityModelRegistry] = None,
        extensions: Optional[SecurityModelRegistry] = None,
    ) -> None:
        self.resolver = resolver
        if registry is None:
            registry = default_registry(membership, extensions)
        self.registry = registry
        self._publish_registry_size()

    def register_security_model(self, tag: SecurityModelTag, builder: PredicateBuilder) -> None:
        self.registry.register(tag, builder)
        self._publish_registry_size()

    def _publish_registry_size(self) -> None:
        tenancy_metrics.set_gauge("scope.registered_models", len(self.registry))

    async def effective_model(self, context: Optional[TenantContext]) -> str:
        return await self.resolver.resolve_context(context)

    async def predicate(self, context: Optional[TenantContext], entity: Any) -> Predicate:
        """Build the tenancy predicate of ``context`` for ``entity``."""
        columns = TenantColumns.for_entity(entity)

        if context is None or context.is_null:
            tenancy_metrics.inc("scope.denied_null_tenant")
            logger.debug("Scoping for null tenant, query matches nothing")
            return false()

        tag = await self.resolver.resolve_context(context)
        try:
            builder = self.registry.get(tag)
        except UnresolvableModelError:
            tenancy_metrics.inc("scope.unresolvable")
            logger.error(
                "Refusing to scope query: no builder for security model %r", tag,
                extra={**tenant_log_extra(context), "security_model": tag},
            )
            raise

        result = builder(columns, context)
        if inspect.isawaitable(result):
            result = await result

        tenancy_metrics.inc(f"scope.applied:{tag}")
        return result

    async def scope(
        self,
        stmt: Select,
        context: Optional[TenantContext],
        entity: Any = None,
    ) -> Select:
        """Return ``stmt`` with the tenancy predicate added to its WHERE clause."""
        if entity is None:
            entity = statement_entity(stmt)
        return stmt.where(await self.predicate(context, entity))


def statement_entity(stmt: Select) -> Any:
    """The primary ORM entity a select statement queries."""
    descriptions = stmt.column_descriptions
    entity = descriptions[0].get("entity") if descriptions else None
    if entity is None:
        raise TypeError("Cannot infer the tenant-aware entity of the statement; pass entity=")
    return entity
