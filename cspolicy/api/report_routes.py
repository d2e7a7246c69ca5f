"""CSP violation report collection endpoint."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import Response

from cspolicy.config.loader import get_settings
from cspolicy.reports.parser import parse_report
from cspolicy.reports.store import append_report, report_filename

logger = structlog.get_logger()

router = APIRouter(tags=["csp-report"])

REPORT_PATH = "/api/cspreport"


@router.post(REPORT_PATH, status_code=204)
async def collect_report(request: Request) -> Response:
    """Accept a browser violation report. Always answers 204."""
    body = await request.body()
    report = parse_report(body, request.headers.get("user-agent"))
    if report is None:
        return Response(status_code=204)

    logger.info(
        "csp_violation_reported",
        document_uri=report.document_uri,
        blocked_uri=report.blocked_uri,
        violated_directive=report.report.get("violated-directive"),
    )

    settings = get_settings()
    if settings.report_dir:
        path = report_filename(settings.report_dir, settings.report_filename_format)
        # file I/O off the event loop
        await asyncio.to_thread(append_report, path, report.json)
    return Response(status_code=204)
