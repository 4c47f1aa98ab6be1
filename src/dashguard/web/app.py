"""FastAPI application with a gated dashboard."""

import html
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse

from dashguard.auth.credentials import verify_password
from dashguard.auth.gate import PasswordVerifier
from dashguard.auth.middleware import LocalRequestCheck, is_local_request, use_basic_auth
from dashguard.config import GateConfig, Settings, get_settings

logger = logging.getLogger(__name__)

DASHBOARD_PAGE = """<!doctype html>
<html>
<head><title>Dashboard</title></head>
<body><h1>Dashboard</h1><p>{path}</p></body>
</html>
"""


def create_app(
    settings: Settings | None = None,
    config: GateConfig | None = None,
    verifier: PasswordVerifier = verify_password,
    is_local: LocalRequestCheck = is_local_request,
) -> FastAPI:
    """Build the application with the dashboard gate installed.

    Configuration errors surface here, before the server accepts traffic.
    """
    if config is None:
        config = GateConfig.from_settings((settings or get_settings()).gate)
    gate_config = config

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan handler."""
        if gate_config.auth_enabled:
            logger.info(
                "Dashboard authentication enabled for %s (%s secret, local bypass %s)",
                gate_config.protected_path_prefix,
                gate_config.secret_mode.value,
                "on" if gate_config.local_bypass_enabled else "off",
            )
        else:
            logger.warning("Dashboard authentication disabled: username or password not set")
        yield

    app = FastAPI(
        title="Dashguard",
        description="Dashboard behind HTTP Basic authentication",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """Health check endpoint for readiness probes."""
        return "ok"

    base = config.protected_path_prefix.rstrip("/")

    async def dashboard_index() -> HTMLResponse:
        return HTMLResponse(DASHBOARD_PAGE.format(path=html.escape(base or "/")))

    async def dashboard_page(rest: str) -> HTMLResponse:
        return HTMLResponse(DASHBOARD_PAGE.format(path=html.escape(f"{base}/{rest}")))

    app.add_api_route(base or "/", dashboard_index, methods=["GET"], response_class=HTMLResponse)
    app.add_api_route(
        f"{base}/{{rest:path}}", dashboard_page, methods=["GET"], response_class=HTMLResponse
    )

    use_basic_auth(app, config=config, verifier=verifier, is_local=is_local)
    return app
