from .route import (
    Forwarder,
    ForwardResult,
    UpstreamStatusError,
    build_query_string,
    build_target_url,
    redirect_to_root,
)

__all__ = [
    "Forwarder",
    "ForwardResult",
    "UpstreamStatusError",
    "build_query_string",
    "build_target_url",
    "redirect_to_root",
]
