"""
Process entry point: load config and TLS material, then run the plaintext
and TLS listeners side by side in one event loop.
"""

import argparse
import asyncio
import logging
from typing import Optional, Sequence, Tuple

import uvicorn

from gateway.config import (
    GatewayConfigError,
    TLSMaterialError,
    load_config,
    load_tls_material,
)
from gateway.models import GatewayConfig, TLSMaterial
from gateway.proxy import Forwarder
from gateway.routing import RouteTable
from gateway.server import create_listener_app
from gateway.telemetry import configure_tracing
from gateway.utils.exception_logging import log_exception_with_details
from gateway.vars import BIND_HOST, GATEWAY_CONFIG, HTTP_PORT, HTTPS_PORT, LOG_LEVEL

logger = logging.getLogger("uvicorn.error")


def build_servers(
    table: RouteTable,
    tls: TLSMaterial,
    host: str = BIND_HOST,
    http_port: int = HTTP_PORT,
    https_port: int = HTTPS_PORT,
    log_level: str = LOG_LEVEL,
    forwarder: Optional[Forwarder] = None,
    tracing: bool = True,
) -> Tuple[uvicorn.Server, uvicorn.Server]:
    forwarder = forwarder or Forwarder()
    http_app = create_listener_app(
        table, secure=False, forwarder=forwarder, https_port=https_port
    )
    https_app = create_listener_app(
        table, secure=True, forwarder=forwarder, https_port=https_port
    )
    if tracing:
        configure_tracing(http_app, https_app)

    http_server = uvicorn.Server(
        uvicorn.Config(http_app, host=host, port=http_port, log_level=log_level)
    )
    https_server = uvicorn.Server(
        uvicorn.Config(
            https_app,
            host=host,
            port=https_port,
            log_level=log_level,
            ssl_keyfile=tls.key_path,
            ssl_certfile=tls.cert_path,
        )
    )
    return http_server, https_server


async def serve(servers: Sequence[uvicorn.Server]) -> None:
    """Run all servers; when one stops, ask the others to stop too."""

    async def _run(server: uvicorn.Server) -> None:
        try:
            await server.serve()
        finally:
            for other in servers:
                other.should_exit = True

    await asyncio.gather(*(_run(server) for server in servers))


def prepare(config_path: str) -> Tuple[GatewayConfig, TLSMaterial, RouteTable]:
    config = load_config(config_path)
    tls = load_tls_material(config.https.keys)
    table = RouteTable.from_config(config)
    return config, tls, table


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="HTTP/HTTPS front-end routing to upstream services and static roots"
    )
    parser.add_argument(
        "-c", "--config", default=GATEWAY_CONFIG, help="Path to the JSON config file"
    )
    parser.add_argument("--host", default=BIND_HOST, help="Address to bind both listeners")
    parser.add_argument("--http-port", type=int, default=HTTP_PORT)
    parser.add_argument("--https-port", type=int, default=HTTPS_PORT)
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s:     %(message)s",
    )

    try:
        _, tls, table = prepare(args.config)
    except (GatewayConfigError, TLSMaterialError) as e:
        log_exception_with_details(
            logger, "[Startup]", e, level=logging.CRITICAL, with_traceback=False
        )
        return 1

    servers = build_servers(
        table,
        tls,
        host=args.host,
        http_port=args.http_port,
        https_port=args.https_port,
        log_level=args.log_level,
    )
    try:
        asyncio.run(serve(servers))
    except KeyboardInterrupt:
        logger.info("[Startup] Interrupted, shutting down")
    return 0
