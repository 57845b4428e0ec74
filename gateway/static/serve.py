import logging
import os
from pathlib import Path

from fastapi import Request
from fastapi.responses import Response
from starlette.staticfiles import StaticFiles

from gateway.models import RouteConfig, RouteKind
from gateway.routing import local_target

logger = logging.getLogger("uvicorn.error")


def relative_static_path(route: RouteConfig, path: str) -> str:
    """Path below the route's directory, in the form StaticFiles expects."""
    remainder = local_target(route, path).lstrip("/")
    if not remainder:
        return "."
    return os.path.normpath(os.path.join(*remainder.split("/")))


def resolve_static_file(route: RouteConfig, path: str) -> Path:
    """Filesystem location a request path maps to (before any lookup)."""
    return Path(route.to_target) / relative_static_path(route, path)


class StaticMount:
    """
    Serves one static route through Starlette's StaticFiles.

    File lookup, content types, conditional requests and traversal checks are
    all left to StaticFiles; a miss raises its 404 HTTPException.
    """

    def __init__(self, route: RouteConfig, html: bool = True):
        if route.kind != RouteKind.STATIC:
            raise ValueError(f"Route {route.from_pattern} is not a static route")
        self.route = route
        self.files = StaticFiles(directory=route.to_target, html=html, check_dir=False)

    async def serve(self, request: Request) -> Response:
        relative = relative_static_path(self.route, request.url.path)
        logger.debug(
            f"[Static] {request.url.path} -> {self.route.to_target} ({relative})"
        )
        return await self.files.get_response(relative, request.scope)


def serve_static(url_prefix: str, directory: str) -> StaticMount:
    return StaticMount(
        RouteConfig(from_pattern=url_prefix, to_target=directory, kind=RouteKind.STATIC)
    )
