"""FastAPI application serving CSP headers and collecting violation reports."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from cspolicy.api.report_routes import router as report_router
from cspolicy.config.loader import load_settings, reset_policy_cache
from cspolicy.logging_config import setup_logging
from cspolicy.middleware.csp_header import ContentSecurityPolicyMiddleware
from cspolicy.policy.factory import build_policy

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load settings, configure logging and validate the policy file."""
    settings = load_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)
    reset_policy_cache()

    # Fail at startup rather than on every request if the policy file is invalid
    policy = build_policy(settings)
    logger.info("csp_policy_loaded", policy=policy.render(), report_only=settings.report_only)

    yield

    logger.info("csp_service_stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="cspolicy", lifespan=lifespan)
    app.add_middleware(ContentSecurityPolicyMiddleware)
    app.include_router(report_router)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
