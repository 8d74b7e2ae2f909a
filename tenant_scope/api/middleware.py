# Copyright (c) 2026 TenantScope Contributors. All Rights Reserved.

"""
API Middleware — Trace ID propagation and current-tenant binding.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from tenant_scope.api.deps import context_from_headers
from tenant_scope.core.logging import tenant_log_extra
from tenant_scope.tenancy.current import reset_current_tenant, set_current_tenant

logger = logging.getLogger("tenancy.api")


class TenantContextMiddleware(BaseHTTPMiddleware):
    """
    Builds the request's TenantContext from headers, binds it to
    ``request.state.tenant`` and to the current-tenant ContextVar for the
    duration of the request, and propagates X-Trace-Id.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4()))
        request.state.trace_id = trace_id

        try:
            tenant = context_from_headers(request.headers)
        except ValueError as e:
            return JSONResponse(
                status_code=400,
                content={"code": "INVALID_TENANT_CONTEXT", "message": str(e), "trace_id": trace_id},
                headers={"X-Trace-Id": trace_id},
            )
        request.state.tenant = tenant

        token = set_current_tenant(tenant)
        start = time.time()
        try:
            response: Response = await call_next(request)
        finally:
            reset_current_tenant(token)
        elapsed = (time.time() - start) * 1000

        response.headers["X-Trace-Id"] = trace_id
        logger.info(
            "[api] %s %s → %d (%.0fms) trace=%s",
            request.method, request.url.path,
            response.status_code, elapsed, trace_id,
            extra={"trace_id": trace_id, **tenant_log_extra(tenant)},
        )
        return response
