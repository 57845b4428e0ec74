"""
Ordered route table shared by both listeners.

The table is built once from the config and never mutated, so both listener
apps read it concurrently without locking. Evaluation order is declaration
order and the first match wins.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple

from gateway.models import GatewayConfig, RouteConfig, RouteKind


class RouteAction(str, Enum):
    FORWARD = "forward"
    STATIC = "static"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RouteMatch:
    route: RouteConfig
    action: RouteAction


def matches_path(route: RouteConfig, path: str) -> bool:
    """
    ``/api*`` matches anything starting with the literal ``/api``.
    ``/api`` matches ``/api`` itself and everything below ``/api/``.
    """
    prefix = route.prefix
    if route.is_wildcard:
        return path.startswith(prefix)

    base = prefix.rstrip("/")
    if not base:
        return True
    return path == base or path.startswith(base + "/")


def local_target(route: RouteConfig, path: str) -> str:
    """
    The part of ``path`` left after removing the route prefix.

    This is a plain slice by the prefix length, with no normalisation, so a
    pattern without a wildcard still strips its own length from longer paths.
    """
    return path[len(route.prefix):]


def _action_for(route: RouteConfig, secure_listener: bool) -> Optional[RouteAction]:
    if secure_listener:
        if not route.secure:
            return None
    elif route.secure:
        return RouteAction.REDIRECT

    if route.kind == RouteKind.FORWARD:
        return RouteAction.FORWARD
    return RouteAction.STATIC


class RouteTable:
    def __init__(self, routes: Iterable[RouteConfig]):
        self._routes: Tuple[RouteConfig, ...] = tuple(routes)
        self._by_listener = {
            secure: self._build_listener_view(secure) for secure in (True, False)
        }

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "RouteTable":
        return cls(RouteConfig.from_entry(entry) for entry in config.routes)

    @property
    def routes(self) -> Tuple[RouteConfig, ...]:
        return self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def for_listener(self, secure: bool) -> Tuple[RouteMatch, ...]:
        """
        Routes visible to one listener, in declaration order.

        The secure listener only serves secure routes. The insecure listener
        serves insecure routes and holds a redirect for every secure one.
        """
        return self._by_listener[secure]

    def _build_listener_view(self, secure: bool) -> Tuple[RouteMatch, ...]:
        entries = []
        for route in self._routes:
            action = _action_for(route, secure)
            if action is not None:
                entries.append(RouteMatch(route=route, action=action))
        return tuple(entries)

    def candidates(self, path: str, secure: bool) -> Iterator[RouteMatch]:
        for entry in self.for_listener(secure):
            if matches_path(entry.route, path):
                yield entry

    def match(self, path: str, secure: bool) -> Optional[RouteMatch]:
        return next(self.candidates(path, secure), None)
