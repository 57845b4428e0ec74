import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import httpx
from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from opentelemetry import trace

from gateway.models import ProxiedRequest, RouteConfig
from gateway.routing import local_target
from gateway.utils.exception_logging import (
    describe_exception,
    log_exception_with_details,
)
from gateway.utils.requests import request_path
from gateway.vars import (
    PROXY_ERROR_STATUS_POLICY,
    PROXY_FOLLOW_REDIRECTS,
    PROXY_RELAY_STATUS,
    PROXY_TIMEOUT,
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# httpx sets these itself for the outbound request
OUTBOUND_MANAGED_HEADERS = {"host", "content-length"}

ERROR_STATUS_POLICIES = ("relay", "redirect")

QueryParams = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def build_query_string(query: QueryParams) -> str:
    """
    Render query parameters as ``?k1=v1&k2=v2`` in the order received.

    Values are inserted as the framework decoded them, without re-encoding.
    An empty set of parameters gives an empty string, never a lone ``?``.
    """
    pairs = query.items() if isinstance(query, Mapping) else query
    rendered = "&".join(f"{key}={value}" for key, value in pairs)
    return f"?{rendered}" if rendered else ""


def build_target_url(route: RouteConfig, path: str, query: QueryParams = ()) -> str:
    """``to_target`` + path left after stripping the route prefix + query string."""
    return f"{route.to_target}{local_target(route, path)}{build_query_string(query)}"


def prepare_headers(request: Request) -> Dict[str, str]:
    """
    Prepare headers for forwarding to the upstream.
    Removes hop-by-hop headers and adds X-Forwarded-* headers.
    """
    headers = {}

    for name, value in request.headers.items():
        name_lower = name.lower()
        if name_lower in HOP_BY_HOP_HEADERS or name_lower in OUTBOUND_MANAGED_HEADERS:
            continue
        headers[name_lower] = value

    client_ip = request.client.host if request.client else "unknown"
    existing_xff = headers.get("x-forwarded-for", "")
    headers["x-forwarded-for"] = f"{existing_xff}, {client_ip}".strip(", ")
    headers["x-forwarded-host"] = request.headers.get("host", "")
    headers["x-forwarded-proto"] = request.url.scheme

    return headers


def redirect_to_root() -> RedirectResponse:
    return RedirectResponse("/", status_code=302)


class UpstreamStatusError(Exception):
    def __init__(self, url: str, status_code: int):
        super().__init__(f"Upstream {url} answered with status {status_code}")
        self.url = url
        self.status_code = status_code


@dataclass(frozen=True)
class ForwardResult:
    response: Optional[httpx.Response] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None


class Forwarder:
    """
    Issues the outbound request for a forward route and turns the outcome
    into the response for the calling client.

    Any outbound failure becomes a redirect to ``/`` on the originating
    listener; it is logged but never surfaced as a 5xx.
    """

    def __init__(
        self,
        timeout: float = PROXY_TIMEOUT,
        relay_status: bool = PROXY_RELAY_STATUS,
        error_status_policy: str = PROXY_ERROR_STATUS_POLICY,
        follow_redirects: bool = PROXY_FOLLOW_REDIRECTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if error_status_policy not in ERROR_STATUS_POLICIES:
            raise ValueError(
                f"error_status_policy must be one of {ERROR_STATUS_POLICIES}, "
                f"got {error_status_policy!r}"
            )
        self.timeout = timeout
        self.relay_status = relay_status
        self.error_status_policy = error_status_policy
        self.follow_redirects = follow_redirects
        self._transport = transport

    async def build_request(self, request: Request, route: RouteConfig) -> ProxiedRequest:
        query = list(request.query_params.multi_items())
        return ProxiedRequest(
            method=request.method,
            route=route,
            target_url=build_target_url(route, request_path(request), query),
            query=tuple(query),
            body=await request.body(),
            headers=prepare_headers(request),
        )

    async def send(self, proxied: ProxiedRequest) -> ForwardResult:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=self.follow_redirects,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method=proxied.method,
                    url=proxied.target_url,
                    headers=proxied.headers,
                    content=proxied.body or None,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return ForwardResult(error=e)

        if self.error_status_policy == "redirect" and not response.is_success:
            return ForwardResult(
                response=response,
                error=UpstreamStatusError(proxied.target_url, response.status_code),
            )
        return ForwardResult(response=response)

    def relay(self, result: ForwardResult) -> Response:
        if not result.ok:
            return redirect_to_root()

        upstream = result.response
        return Response(
            content=upstream.content,
            status_code=upstream.status_code if self.relay_status else 200,
            media_type=upstream.headers.get("content-type"),
        )

    async def forward(self, request: Request, route: RouteConfig) -> Response:
        with tracer.start_as_current_span("proxy_request") as span:
            proxied = await self.build_request(request, route)
            span.set_attribute("proxy.route", route.from_pattern)
            span.set_attribute("proxy.target_url", proxied.target_url)
            span.set_attribute("proxy.method", proxied.method)

            logger.debug(
                f"Proxying {proxied.method} {request.url.path} -> {proxied.target_url}"
            )

            result = await self.send(proxied)
            if result.response is not None:
                span.set_attribute("proxy.status_code", result.response.status_code)

            if not result.ok:
                span.set_attribute("proxy.error", describe_exception(result.error))
                log_exception_with_details(
                    logger,
                    f"[Proxy] {proxied.method} {proxied.target_url} failed, redirecting to /.",
                    result.error,
                    level=logging.WARNING,
                    with_traceback=False,
                )

            return self.relay(result)

