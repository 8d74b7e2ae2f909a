# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
Structured Logging — JSON format with trace and tenant context.
"""

from __future__ import annotations

import json
import logging
import sys

CONTEXT_KEYS = ("trace_id", "tenant_owner_id", "tenant_creator_id", "security_model")


class StructuredFormatter(logging.Formatter):
    """JSON log formatter with trace/tenant context."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        # Attach context if available
        for key in CONTEXT_KEYS:
            val = getattr(record, key, None)
            if val:
                log_entry[key] = val

        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def tenant_log_extra(context) -> dict:
    """Build the ``extra=`` mapping for a log call made on behalf of a tenant."""
    if context is None:
        return {}
    return {
        "tenant_owner_id": context.owner_id,
        "tenant_creator_id": context.creator_id,
    }


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging for the process."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
