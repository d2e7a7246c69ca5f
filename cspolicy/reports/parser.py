"""CSP violation report parsing and browser noise filtering.

Reports come from untrusted browsers, so malformed input is never an
error: anything that is not a well-formed ``{"csp-report": {...}}`` object
yields None.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

import structlog

logger = structlog.get_logger()

_URI_FIELDS = ("document-uri", "blocked-uri", "source-file")


@dataclass(frozen=True)
class ParsedReport:
    """An accepted violation report and its pretty-printed JSON."""

    data: dict[str, Any]
    json: str

    @property
    def report(self) -> dict[str, Any]:
        return self.data["csp-report"]

    @property
    def document_uri(self) -> str | None:
        return self.report["document-uri"]

    @property
    def blocked_uri(self) -> str | None:
        return self.report["blocked-uri"]

    @property
    def source_file(self) -> str | None:
        return self.report["source-file"]


def _noise_reason(report: dict[str, Any]) -> str | None:
    """Return why a report is a known false positive, or None."""
    source_file = report["source-file"]
    document_uri = report["document-uri"]

    if isinstance(source_file, str) and source_file.startswith("moz-extension://"):
        return "firefox_extension"
    if document_uri == "about":
        return "chrome_extension"
    if isinstance(document_uri, str) and report["blocked-uri"] == "inline":
        try:
            path = urlsplit(document_uri).path
        except ValueError:
            path = ""
        if path.lower().endswith(".pdf"):
            return "pdf_viewer"
    return None


def parse_report(
    raw_body: bytes | str,
    user_agent: str | None = None,
    now: datetime | None = None,
) -> ParsedReport | None:
    """Validate and normalize a violation report body.

    Missing document-uri, blocked-uri and source-file fields are set to
    null. The report is stamped with ``currenttime`` (HH:MM:SS) and
    ``useragent``.
    """
    if not raw_body:
        return None
    try:
        data = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None

    report = data.get("csp-report")
    if not isinstance(report, dict):
        return None

    for name in _URI_FIELDS:
        report.setdefault(name, None)

    reason = _noise_reason(report)
    if reason is not None:
        logger.debug("csp_report_filtered", reason=reason, document_uri=report["document-uri"])
        return None

    data["currenttime"] = (now or datetime.now()).strftime("%H:%M:%S")
    data["useragent"] = user_agent or "none"

    return ParsedReport(data=data, json=json.dumps(data, indent=4))
