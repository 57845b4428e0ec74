"""
Listener apps.

Each listener is a FastAPI app with a single catch-all route; the route
table decides per request whether to forward, serve files or redirect.
"""

import logging
from typing import Dict, Optional, Sequence

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.models import RouteConfig, RouteKind
from gateway.proxy import Forwarder
from gateway.redirect import redirect_to_secure
from gateway.routing import RouteAction, RouteTable
from gateway.static import StaticMount
from gateway.utils.requests import request_path
from gateway.vars import CORS_ALLOW_ORIGINS, HTTPS_PORT, STATIC_FALLTHROUGH

logger = logging.getLogger("uvicorn.error")


class Dispatcher:
    def __init__(
        self,
        table: RouteTable,
        secure: bool,
        forwarder: Forwarder,
        https_port: int = HTTPS_PORT,
        static_fallthrough: bool = STATIC_FALLTHROUGH,
    ):
        self.table = table
        self.secure = secure
        self.forwarder = forwarder
        self.https_port = https_port
        self.static_fallthrough = static_fallthrough
        self._static: Dict[RouteConfig, StaticMount] = {
            entry.route: StaticMount(entry.route)
            for entry in table.for_listener(secure)
            if entry.action == RouteAction.STATIC
        }

    @property
    def listener_name(self) -> str:
        return "https" if self.secure else "http"

    async def dispatch(self, request: Request) -> Response:
        path = request_path(request)
        for entry in self.table.candidates(path, self.secure):
            route = entry.route
            if entry.action == RouteAction.REDIRECT:
                return redirect_to_secure(request, https_port=self.https_port)
            if entry.action == RouteAction.FORWARD:
                return await self.forwarder.forward(request, route)

            try:
                return await self._static[route].serve(request)
            except StarletteHTTPException as e:
                if e.status_code == 404 and self.static_fallthrough:
                    logger.debug(
                        f"[Static] No file for {path} under {route.from_pattern}, "
                        "trying next route"
                    )
                    continue
                raise

        logger.debug(f"[{self.listener_name}] No route for {request.method} {path}")
        raise HTTPException(status_code=404, detail="Not Found")


def create_listener_app(
    table: RouteTable,
    secure: bool,
    forwarder: Optional[Forwarder] = None,
    https_port: int = HTTPS_PORT,
    static_fallthrough: bool = STATIC_FALLTHROUGH,
    cors_allow_origins: Sequence[str] = CORS_ALLOW_ORIGINS,
) -> FastAPI:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    if secure:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cors_allow_origins),
            allow_methods=["*"],
            allow_headers=["*"],
        )

    dispatcher = Dispatcher(
        table,
        secure,
        forwarder or Forwarder(),
        https_port=https_port,
        static_fallthrough=static_fallthrough,
    )
    app.state.dispatcher = dispatcher

    async def dispatch_all(request: Request) -> Response:
        return await dispatcher.dispatch(request)

    # A plain Starlette route with no method list accepts every method,
    # WebDAV and extension methods included.
    app.add_route("/{path:path}", dispatch_all, include_in_schema=False)

    served = [e for e in table.for_listener(secure) if e.action != RouteAction.REDIRECT]
    redirects = len(table.for_listener(secure)) - len(served)
    logger.info(
        f"[{dispatcher.listener_name}] {len(served)} route(s) served, "
        f"{redirects} redirected to https"
    )
    for entry in served:
        kind = "forward" if entry.route.kind == RouteKind.FORWARD else "static"
        logger.info(
            f"[{dispatcher.listener_name}] {entry.route.from_pattern} -> "
            f"{entry.route.to_target} ({kind})"
        )
    return app
