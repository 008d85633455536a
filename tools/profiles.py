"""Profile listing tool for Amazon Ads MCP Server."""
import logging
from typing import Any, Dict

from fastmcp import Context

from amazon_ads.credentials import client_from_user_credentials
from amazon_ads.entities import fetch_profiles
from mcp_instance import mcp
from tools.common import run_tool, to_str

logger = logging.getLogger(__name__)


def _list_profiles(user_credentials: Dict[str, Any]) -> Dict[str, Any]:
    with client_from_user_credentials(user_credentials) as client:
        profiles = fetch_profiles(client)

    logger.info("Retrieved %d profiles", len(profiles))
    result = []
    for profile in profiles:
        account = profile.get("accountInfo") or {}
        profile_id = to_str(profile.get("profileId"))
        result.append({
            "profile_id": profile_id,
            "country_code": profile.get("countryCode"),
            "currency_code": profile.get("currencyCode"),
            "timezone": profile.get("timezone"),
            "marketplace_id": account.get("marketplaceStringId"),
            "name": account.get("name") or f"Profile {profile_id}",
            "type": account.get("type") or "seller",
        })
    return {"profiles": result, "total_count": len(result)}


@mcp.tool
async def get_profiles(
    user_credentials: Dict[str, Any],
    ctx: Context = None,
) -> Dict[str, Any]:
    """Retrieve all Amazon Ads profiles across marketplaces.

    Args:
        user_credentials: Either {"sessionToken": ...} or {"access_token": ..., "client_id": ...}

    Returns:
        Profiles with id, country, currency, timezone, marketplace and account name
    """
    if ctx:
        await ctx.info("Fetching Amazon Ads profiles...")

    result = await run_tool("get_profiles", _list_profiles, user_credentials, ctx=ctx)

    if ctx:
        await ctx.info(f"Retrieved {result['total_count']} profiles.")
    return result
