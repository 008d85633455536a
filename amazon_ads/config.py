"""Process-wide configuration for the Amazon Ads MCP server (from .env / environment)."""
import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


SERVICE_NAME = "mcp-amazon-ads"
SERVER_VERSION = "1.0.0"

# Amazon Advertising API
AMAZON_ADS_API_URL = os.environ.get("AMAZON_ADS_API_URL", "https://advertising-api.amazon.com").rstrip("/")
REQUEST_TIMEOUT = _env_float("AMAZON_ADS_REQUEST_TIMEOUT", 30.0)

# Session-token exchange backend
BACKEND_API_URL = os.environ.get("BACKEND_API_URL", "https://api.chatwithads.com").rstrip("/")
TOKEN_ENDPOINT = f"{BACKEND_API_URL}/api/mcp/tokens"
TOKEN_REQUEST_TIMEOUT = _env_float("TOKEN_REQUEST_TIMEOUT", 5.0)
PLATFORM_NAME = "amazon_ads"

# Report polling (30 x 2s ~= 60s budget)
REPORT_MAX_POLL_ATTEMPTS = _env_int("REPORT_MAX_POLL_ATTEMPTS", 30)
REPORT_POLL_INTERVAL = _env_float("REPORT_POLL_INTERVAL", 2.0)

# General backoff
RETRY_MAX_ATTEMPTS = _env_int("RETRY_MAX_ATTEMPTS", 3)
RETRY_INITIAL_DELAY = _env_float("RETRY_INITIAL_DELAY", 1.0)
RETRY_MAX_DELAY = _env_float("RETRY_MAX_DELAY", 30.0)
RETRY_BACKOFF_MULTIPLIER = _env_float("RETRY_BACKOFF_MULTIPLIER", 2.0)

# Server
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
MCP_HTTP_HOST = os.environ.get("MCP_HTTP_HOST", "127.0.0.1")
MCP_HTTP_PORT = _env_int("PORT", 3002)
