"""Content-Security-Policy header middleware."""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cspolicy.config.loader import get_settings
from cspolicy.policy.exceptions import MissingReportUri
from cspolicy.policy.factory import build_policy

logger = structlog.get_logger()


class ContentSecurityPolicyMiddleware(BaseHTTPMiddleware):
    """Attach a per-request Content-Security-Policy to every response.

    The builder is stored on ``request.state.csp`` before the handler runs,
    so handlers can add nonces or hashes for the page they render. The
    header is rendered after the handler returns.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()
        policy = build_policy(settings)
        request.state.csp = policy

        response = await call_next(request)

        policy.send_header(response)
        if settings.report_only:
            try:
                policy.send_report_only_header(response)
            except MissingReportUri:
                logger.warning("csp_report_only_skipped", reason="no report uri", path=request.url.path)
        return response
