# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
API Error Handling — Unified error structure.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tenant_scope.core.errors import (
    RecordOutOfScopeError,
    TenancyError,
    TenancyStampError,
    UnresolvableModelError,
)

logger = logging.getLogger("tenancy.api")


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        trace_id: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.trace_id = trace_id or str(uuid.uuid4())
        super().__init__(message)


_STATUS_BY_ERROR = {
    UnresolvableModelError: 500,
    TenancyStampError: 409,
    RecordOutOfScopeError: 404,
}


def api_error_from_tenancy(exc: TenancyError, trace_id: Optional[str] = None) -> APIError:
    status_code = next(
        (status for cls, status in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        500,
    )
    details = {"security_model": exc.tag} if isinstance(exc, UnresolvableModelError) else {}
    return APIError(
        code=exc.code,
        message=str(exc),
        status_code=status_code,
        details=details,
        trace_id=trace_id,
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Global exception handler for APIError."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code,
            "message": exc.message,
            "trace_id": exc.trace_id,
            "details": exc.details,
        },
    )


async def tenancy_error_handler(request: Request, exc: TenancyError) -> JSONResponse:
    """Global exception handler for errors raised by the scoping engine."""
    api_error = api_error_from_tenancy(exc, getattr(request.state, "trace_id", None))
    if api_error.status_code >= 500:
        logger.error("Tenancy failure: %s", exc, extra={"trace_id": api_error.trace_id})
    return await api_error_handler(request, api_error)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(TenancyError, tenancy_error_handler)
