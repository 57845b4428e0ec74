from fastapi import Request
from fastapi.responses import RedirectResponse

from gateway.utils.requests import request_path, request_query
from gateway.vars import HTTPS_PORT

DEFAULT_HTTPS_PORT = 443


def _with_port(host: str, port: int) -> str:
    # keep bracketed IPv6 literals intact
    if host.startswith("["):
        end = host.find("]")
        hostname = host[: end + 1] if end != -1 else host
    else:
        hostname = host.split(":", 1)[0]
    if port == DEFAULT_HTTPS_PORT:
        return hostname
    return f"{hostname}:{port}"


def secure_url(
    host: str,
    path: str,
    query: str = "",
    https_port: int = DEFAULT_HTTPS_PORT,
) -> str:
    """
    ``https://<host><path>[?<query>]``, with the Host header's port swapped for
    the secure listener's port (dropped entirely when that port is 443).
    """
    url = f"https://{_with_port(host, https_port)}{path}"
    if query:
        url = f"{url}?{query}"
    return url


def redirect_to_secure(request: Request, https_port: int = HTTPS_PORT) -> RedirectResponse:
    host = request.headers.get("host") or request.url.netloc
    return RedirectResponse(
        secure_url(host, request_path(request), request_query(request), https_port),
        status_code=302,
    )
