"""Campaign & ad group listing tools for Amazon Ads MCP Server."""
import logging
from typing import Any, Dict, Optional

from fastmcp import Context

from amazon_ads.credentials import client_from_user_credentials
from amazon_ads.entities import fetch_ad_groups, fetch_campaigns
from mcp_instance import mcp
from tools.common import CAMPAIGN_TYPE_NAMES, check_campaign_type, epoch_ms_to_iso, run_tool, to_str

logger = logging.getLogger(__name__)


def _list_campaigns(user_credentials, campaign_type, filters, paging) -> Dict[str, Any]:
    campaign_type = check_campaign_type(campaign_type)
    with client_from_user_credentials(user_credentials) as client:
        scope = client.scope()
        campaigns = fetch_campaigns(client, scope, campaign_type, filters, paging)

    logger.info("Retrieved %d %s campaigns for profile %s", len(campaigns), campaign_type, scope.profile_id)
    result = []
    for c in campaigns:
        budget = c.get("budget") or {}
        bidding = c.get("bidding") or {}
        result.append({
            "campaign_id": to_str(c.get("campaignId")),
            "name": c.get("name"),
            "campaign_type": CAMPAIGN_TYPE_NAMES.get(campaign_type, campaign_type),
            "targeting_type": c.get("targetingType"),
            "state": c.get("state"),
            "daily_budget": c.get("dailyBudget") or budget.get("budget"),
            "start_date": c.get("startDate"),
            "end_date": c.get("endDate"),
            "premium_bid_adjustment": bool(c.get("premiumBidAdjustment", False)),
            "bidding_strategy": bidding.get("strategy"),
            "portfolio_id": to_str(c.get("portfolioId")),
            "creation_date": epoch_ms_to_iso(c.get("creationDate")),
            "last_updated_date": epoch_ms_to_iso(c.get("lastUpdatedDate")),
        })
    return {"campaigns": result, "total_count": len(result), "profile_id": scope.profile_id}


def _list_ad_groups(user_credentials, campaign_type, filters, paging) -> Dict[str, Any]:
    campaign_type = check_campaign_type(campaign_type)
    with client_from_user_credentials(user_credentials) as client:
        scope = client.scope()
        ad_groups = fetch_ad_groups(client, scope, campaign_type, filters, paging)

    logger.info("Retrieved %d ad groups for profile %s", len(ad_groups), scope.profile_id)
    result = [{
        "ad_group_id": to_str(ag.get("adGroupId")),
        "campaign_id": to_str(ag.get("campaignId")),
        "name": ag.get("name"),
        "state": ag.get("state"),
        "default_bid": ag.get("defaultBid"),
        "serving_status": ag.get("servingStatus"),
        "creation_date": epoch_ms_to_iso(ag.get("creationDate")),
        "last_updated_date": epoch_ms_to_iso(ag.get("lastUpdatedDate")),
    } for ag in ad_groups]
    return {"ad_groups": result, "total_count": len(result), "profile_id": scope.profile_id}


@mcp.tool
async def get_campaigns(
    user_credentials: Dict[str, Any],
    campaign_type: str = "sp",
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
    ctx: Context = None,
) -> Dict[str, Any]:
    """Fetch advertising campaigns with status and budget information.

    Args:
        user_credentials: Session token or access_token/client_id; profile_id is required
        campaign_type: sp (Sponsored Products), sb (Sponsored Brands) or sd (Sponsored Display)
        filters: Optional {"state", "name", "campaign_id_filter": [...]}
        paging: Optional {"start_index", "count"} (count capped at 100)
    """
    if ctx:
        await ctx.info(f"Fetching {campaign_type} campaigns...")

    result = await run_tool("get_campaigns", _list_campaigns, user_credentials, campaign_type, filters, paging,
                            ctx=ctx)

    if ctx:
        await ctx.info(f"Retrieved {result['total_count']} campaigns.")
    return result


@mcp.tool
async def get_ad_groups(
    user_credentials: Dict[str, Any],
    campaign_type: str = "sp",
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
    ctx: Context = None,
) -> Dict[str, Any]:
    """Retrieve ad groups with targeting and bid settings.

    filters: Optional {"state", "name", "campaign_id_filter": [...], "ad_group_id_filter": [...]}
    """
    if ctx:
        await ctx.info(f"Fetching {campaign_type} ad groups...")

    result = await run_tool("get_ad_groups", _list_ad_groups, user_credentials, campaign_type, filters, paging,
                            ctx=ctx)

    if ctx:
        await ctx.info(f"Retrieved {result['total_count']} ad groups.")
    return result
