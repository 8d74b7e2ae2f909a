# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Security Models — Sharing policies attached to tenant participants.

Built-in tags:
  - shared:  every creator under an owner sees all of the owner's records
  - user:    the acting user sees records of the creators they are a member of
  - closed:  a creator sees only the records it created
  - inherit: take the parent participant's model (never terminal)

Any other non-empty string is an extension tag; it becomes usable once a
predicate builder is registered for it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class SecurityModel(str, Enum):
    """Built-in security model tags."""

    SHARED = "shared"
    USER = "user"
    CLOSED = "closed"
    INHERIT = "inherit"


SecurityModelTag = Union[SecurityModel, str]

# Least-privilege fallback for unresolvable inherit chains.
DEFAULT_SECURITY_MODEL = SecurityModel.CLOSED.value


def normalize_tag(tag: SecurityModelTag) -> str:
    """Return the canonical (lower-case) string form of a model tag."""
    if isinstance(tag, SecurityModel):
        return tag.value
    if tag is None or not str(tag).strip():
        raise ValueError("security model tag must not be empty")
    return str(tag).strip().lower()


def participant_tag(value: Optional[SecurityModelTag]) -> str:
    """Tag of a participant's stored model; unset means inherit from the parent."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return SecurityModel.INHERIT.value
    return normalize_tag(value)


def is_inherit(tag: Optional[SecurityModelTag]) -> bool:
    return participant_tag(tag) == SecurityModel.INHERIT.value
