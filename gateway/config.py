import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from gateway.models import GatewayConfig, HttpsKeys, TLSMaterial

logger = logging.getLogger("uvicorn.error")


class GatewayConfigError(Exception):
    """The config file is missing, unparsable or has the wrong shape."""


class TLSMaterialError(Exception):
    """Key or certificate could not be read; the secure listener cannot start."""


def read_file(path: Union[str, Path]) -> bytes:
    return Path(path).read_bytes()


def parse_config(raw: Union[str, bytes, dict]) -> GatewayConfig:
    try:
        if isinstance(raw, dict):
            return GatewayConfig.model_validate(raw)
        return GatewayConfig.model_validate_json(raw)
    except ValidationError as e:
        raise GatewayConfigError(f"Invalid gateway config: {e}") from e


def load_config(path: Union[str, Path]) -> GatewayConfig:
    """Read and validate the JSON config file at ``path``."""
    try:
        raw = read_file(path)
    except OSError as e:
        raise GatewayConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GatewayConfigError(f"Config file {path} is not valid JSON: {e}") from e

    config = parse_config(data)
    logger.info(f"[Config] Loaded {len(config.routes)} route(s) from {path}")
    return config


def load_tls_material(keys: HttpsKeys) -> TLSMaterial:
    """
    Read the private key and certificate once at startup.

    The bytes only serve as a readability check before any listener starts:
    uvicorn loads the key and certificate itself from ``key_path`` and
    ``cert_path``, so the TLS listener serves whatever those files hold when
    uvicorn reads them.

    Raises TLSMaterialError when either file is missing, unreadable or empty.
    """
    try:
        key = read_file(keys.private)
    except OSError as e:
        raise TLSMaterialError(f"Cannot read private key {keys.private}: {e}") from e
    try:
        cert = read_file(keys.public)
    except OSError as e:
        raise TLSMaterialError(f"Cannot read certificate {keys.public}: {e}") from e

    if not key or not cert:
        raise TLSMaterialError("Private key or certificate file is empty")

    return TLSMaterial(
        key_path=str(keys.private),
        cert_path=str(keys.public),
        key=key,
        cert=cert,
    )
