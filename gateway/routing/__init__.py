from .route_table import (
    RouteAction,
    RouteMatch,
    RouteTable,
    local_target,
    matches_path,
)

__all__ = [
    "RouteAction",
    "RouteMatch",
    "RouteTable",
    "local_target",
    "matches_path",
]
