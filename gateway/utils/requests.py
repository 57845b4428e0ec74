from starlette.requests import Request


def request_path(request: Request) -> str:
    """The path as sent by the client, still percent-encoded when available."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return request.url.path


def request_query(request: Request) -> str:
    return request.scope.get("query_string", b"").decode("latin-1")
