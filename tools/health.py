"""Healthcheck tool: reports degraded/unhealthy status instead of raising."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastmcp import Context

from amazon_ads import config
from amazon_ads.credentials import client_from_user_credentials
from amazon_ads.entities import fetch_profiles
from amazon_ads.errors import AmazonAdsError, ErrorKind
from amazon_ads.retry import RetryPolicy
from mcp_instance import mcp

logger = logging.getLogger(__name__)

# Temporary upstream conditions; anything else (auth, scope, credentials) is unhealthy
DEGRADED_KINDS = {ErrorKind.UPSTREAM_SERVER, ErrorKind.RATE_LIMITED}

# One shot: a healthcheck should answer quickly rather than back off
PROBE_POLICY = RetryPolicy(max_attempts=1, rate_limit_attempts=1)


def _probe(user_credentials: Dict[str, Any]) -> Dict[str, Any]:
    started = time.monotonic()
    status = "healthy"
    api_connectivity = False
    profile_count = 0

    try:
        logger.info("Running health check")
        with client_from_user_credentials(user_credentials) as client:
            profiles = fetch_profiles(client, PROBE_POLICY)
        api_connectivity = True
        profile_count = len(profiles)
        logger.info("Health check passed")
    except AmazonAdsError as e:
        logger.warning("Health check failed: %r", e)
        status = "degraded" if e.kind in DEGRADED_KINDS else "unhealthy"
    except Exception:
        logger.exception("Health check failed unexpectedly")
        status = "unhealthy"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.SERVER_VERSION,
        "api_connectivity": api_connectivity,
        "api_response_time_ms": int((time.monotonic() - started) * 1000),
        "profiles_accessible": api_connectivity,
        "profile_count": profile_count,
    }


@mcp.tool
async def healthcheck(
    user_credentials: Dict[str, Any],
    ctx: Context = None,
) -> Dict[str, Any]:
    """Check Amazon Ads MCP server health and API connectivity."""
    result = await asyncio.to_thread(_probe, user_credentials)
    if ctx:
        await ctx.info(f"Health status: {result['status']}")
    return result
