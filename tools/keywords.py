"""Keyword and product ad listing tools (Sponsored Products only)."""
import logging
from typing import Any, Dict, Optional

from fastmcp import Context

from amazon_ads.credentials import client_from_user_credentials
from amazon_ads.entities import fetch_keywords, fetch_product_ads
from mcp_instance import mcp
from tools.common import run_tool, to_str

logger = logging.getLogger(__name__)


def _list_keywords(user_credentials, filters, paging) -> Dict[str, Any]:
    with client_from_user_credentials(user_credentials) as client:
        scope = client.scope()
        keywords = fetch_keywords(client, scope, filters, paging)

    logger.info("Retrieved %d keywords for profile %s", len(keywords), scope.profile_id)
    result = [{
        "keyword_id": to_str(kw.get("keywordId")),
        "ad_group_id": to_str(kw.get("adGroupId")),
        "campaign_id": to_str(kw.get("campaignId")),
        "keyword_text": kw.get("keywordText"),
        "match_type": kw.get("matchType"),
        "state": kw.get("state"),
        "bid": kw.get("bid"),
        "native_language_keyword": kw.get("nativeLanguageKeyword"),
    } for kw in keywords]
    return {"keywords": result, "total_count": len(result), "profile_id": scope.profile_id}


def _list_product_ads(user_credentials, filters, paging) -> Dict[str, Any]:
    with client_from_user_credentials(user_credentials) as client:
        scope = client.scope()
        product_ads = fetch_product_ads(client, scope, filters, paging)

    logger.info("Retrieved %d product ads for profile %s", len(product_ads), scope.profile_id)
    result = [{
        "ad_id": to_str(ad.get("adId")),
        "ad_group_id": to_str(ad.get("adGroupId")),
        "campaign_id": to_str(ad.get("campaignId")),
        "asin": ad.get("asin"),
        "sku": ad.get("sku"),
        "state": ad.get("state"),
    } for ad in product_ads]
    return {"product_ads": result, "total_count": len(result), "profile_id": scope.profile_id}


@mcp.tool
async def get_keywords(
    user_credentials: Dict[str, Any],
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
    ctx: Context = None,
) -> Dict[str, Any]:
    """Fetch keywords with bids and match types for Sponsored Products.

    filters: Optional {"state", "match_type", "campaign_id_filter", "ad_group_id_filter", "keyword_id_filter"}
    """
    if ctx:
        await ctx.info("Fetching keywords...")

    result = await run_tool("get_keywords", _list_keywords, user_credentials, filters, paging, ctx=ctx)

    if ctx:
        await ctx.info(f"Retrieved {result['total_count']} keywords.")
    return result


@mcp.tool
async def get_product_ads(
    user_credentials: Dict[str, Any],
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
    ctx: Context = None,
) -> Dict[str, Any]:
    """List product ads with ASIN/SKU information."""
    if ctx:
        await ctx.info("Fetching product ads...")

    result = await run_tool("get_product_ads", _list_product_ads, user_credentials, filters, paging, ctx=ctx)

    if ctx:
        await ctx.info(f"Retrieved {result['total_count']} product ads.")
    return result
