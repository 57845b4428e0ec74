import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "edge-gateway")
GATEWAY_CONFIG = os.environ.get("GATEWAY_CONFIG", "config.json")

BIND_HOST = os.environ.get("BIND_HOST", "0.0.0.0")
HTTP_PORT = int(os.environ.get("HTTP_PORT", "80"))
HTTPS_PORT = int(os.environ.get("HTTPS_PORT", "443"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").lower()

PROXY_TIMEOUT = float(os.environ.get("PROXY_TIMEOUT", "30"))
PROXY_RELAY_STATUS = os.environ.get("PROXY_RELAY_STATUS", "false").lower() == "true"
PROXY_FOLLOW_REDIRECTS = (
    os.environ.get("PROXY_FOLLOW_REDIRECTS", "true").lower() == "true"
)
# "relay" passes non-2xx upstream answers through, "redirect" treats them as failures
PROXY_ERROR_STATUS_POLICY = os.environ.get("PROXY_ERROR_STATUS_POLICY", "relay").lower()

STATIC_FALLTHROUGH = os.environ.get("STATIC_FALLTHROUGH", "false").lower() == "true"

CORS_ALLOW_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
]

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
