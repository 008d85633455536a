"""Helpers shared by the tool modules: thread offload and error mapping."""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fastmcp import Context
from fastmcp.exceptions import ToolError

from amazon_ads.entities import CAMPAIGN_TYPES
from amazon_ads.errors import AmazonAdsError, ValidationError

logger = logging.getLogger(__name__)

CAMPAIGN_TYPE_NAMES = {
    "sp": "sponsoredProducts",
    "sb": "sponsoredBrands",
    "sd": "sponsoredDisplay",
}


def tool_error(exc: Exception) -> ToolError:
    """ToolError whose message is the JSON error payload callers key on."""
    if isinstance(exc, AmazonAdsError):
        payload = exc.to_payload()
    else:
        payload = {"type": "INTERNAL", "kind": "INTERNAL", "message": str(exc) or type(exc).__name__,
                   "upstream_code": None, "code": None}
    return ToolError(json.dumps(payload))


async def run_tool(name: str, fn: Callable[..., Any], *args: Any, ctx: Optional[Context] = None) -> Any:
    """Run the blocking body of a tool in a worker thread and map its errors."""
    try:
        return await asyncio.to_thread(fn, *args)
    except AmazonAdsError as e:
        logger.error("%s failed: %r", name, e)
        if ctx:
            await ctx.error(f"{name} failed: {e.message}")
        raise tool_error(e) from e
    except Exception as e:
        logger.exception("%s failed unexpectedly", name)
        if ctx:
            await ctx.error(f"{name} failed: {str(e)}")
        raise tool_error(e) from e


def check_campaign_type(campaign_type: str) -> str:
    campaign_type = (campaign_type or "sp").lower()
    if campaign_type not in CAMPAIGN_TYPES:
        raise ValidationError(
            f"Invalid campaign_type '{campaign_type}'. Must be one of: {', '.join(sorted(CAMPAIGN_TYPES))}"
        )
    return campaign_type


def to_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def epoch_ms_to_iso(value: Any) -> Optional[str]:
    if not value:
        return None
    ts = datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")
