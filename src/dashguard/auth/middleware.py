"""ASGI middleware that applies the authentication gate to Starlette/FastAPI apps."""

import ipaddress
import logging
from collections.abc import Callable

from starlette import status
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocketClose

from dashguard.auth.credentials import verify_password
from dashguard.auth.gate import AuthGate, GateRequest, PasswordVerifier
from dashguard.config import GateConfig, get_settings

logger = logging.getLogger(__name__)

LocalRequestCheck = Callable[[Scope], bool]


def is_local_request(scope: Scope) -> bool:
    """Check whether the peer is this machine.

    A request is local when the client address is a loopback address or
    matches the address the server is bound to.
    """
    client = scope.get("client")
    if not client:
        return False

    host = client[0]
    try:
        if ipaddress.ip_address(host).is_loopback:
            return True
    except ValueError:
        pass

    server = scope.get("server")
    return bool(server) and server[0] == host


class BasicAuthMiddleware:
    """Require HTTP Basic Auth for everything under the protected prefix.

    Requests outside the prefix, or when no credentials are configured, go
    straight to the wrapped app. Denied requests get ``401`` with
    ``WWW-Authenticate: Basic`` and an empty body.
    """

    def __init__(
        self,
        app: ASGIApp,
        config: GateConfig,
        verifier: PasswordVerifier = verify_password,
        is_local: LocalRequestCheck = is_local_request,
    ) -> None:
        self.app = app
        self.gate = AuthGate(config, verifier)
        self.is_local = is_local

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        request = GateRequest(
            path=scope["path"],
            headers=Headers(scope=scope),
            is_local=self.is_local(scope),
        )

        if not self.gate.requires_authentication(request):
            await self.app(scope, receive, send)
            return

        # Hash verification is CPU-bound; keep it off the event loop
        decision = await run_in_threadpool(self.gate.decide, request)

        if decision.allowed:
            await self.app(scope, receive, send)
            return

        if scope["type"] == "websocket":
            await WebSocketClose(code=status.WS_1008_POLICY_VIOLATION)(scope, receive, send)
            return

        response = Response(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Basic"},
        )
        await response(scope, receive, send)


def use_basic_auth(
    app: Starlette,
    config: GateConfig | None = None,
    verifier: PasswordVerifier = verify_password,
    is_local: LocalRequestCheck = is_local_request,
) -> Starlette:
    """Install the gate on an application.

    When no config is given it is built from ``HANGFIRE_*`` settings.
    """
    if config is None:
        config = GateConfig.from_settings(get_settings().gate)

    if not config.auth_enabled:
        logger.info("Dashboard credentials not configured, authentication disabled")

    app.add_middleware(BasicAuthMiddleware, config=config, verifier=verifier, is_local=is_local)
    return app
