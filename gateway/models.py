from dataclasses import dataclass, field
from enum import Enum
from typing import List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field


WILDCARD = "*"


class RouteKind(str, Enum):
    FORWARD = "dynamic"
    STATIC = "static"


class RoutePath(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class RouteSettings(BaseModel):
    type: Literal["dynamic", "static"]
    secure: bool = False


class RouteEntry(BaseModel):
    path: RoutePath
    settings: RouteSettings


class HttpsKeys(BaseModel):
    private: str
    public: str


class HttpsSettings(BaseModel):
    keys: HttpsKeys


class GatewayConfig(BaseModel):
    """Shape of the JSON config file."""

    https: HttpsSettings
    routes: List[RouteEntry] = Field(default_factory=list)


@dataclass(frozen=True)
class RouteConfig:
    from_pattern: str
    to_target: str
    kind: RouteKind
    secure: bool = False

    @property
    def prefix(self) -> str:
        """The pattern with its trailing wildcard removed."""
        if self.from_pattern.endswith(WILDCARD):
            return self.from_pattern[: -len(WILDCARD)]
        return self.from_pattern

    @property
    def is_wildcard(self) -> bool:
        return self.from_pattern.endswith(WILDCARD)

    @classmethod
    def from_entry(cls, entry: RouteEntry) -> "RouteConfig":
        return cls(
            from_pattern=entry.path.from_,
            to_target=entry.path.to,
            kind=RouteKind(entry.settings.type),
            secure=entry.settings.secure,
        )


@dataclass(frozen=True)
class TLSMaterial:
    key_path: str
    cert_path: str
    key: bytes = field(repr=False)
    cert: bytes = field(repr=False)


@dataclass(frozen=True)
class ProxiedRequest:
    method: str
    route: RouteConfig
    target_url: str
    query: Sequence[Tuple[str, str]] = ()
    body: bytes = b""
    headers: Optional[dict] = None
