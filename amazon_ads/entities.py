"""Listing adapters for profiles, campaigns, ad groups, keywords and product ads."""
from typing import Any, Dict, List, Optional

from amazon_ads.client import AmazonAdsClient, RequestScope, UNSCOPED
from amazon_ads.errors import UpstreamContractError
from amazon_ads.retry import DEFAULT_POLICY, RetryPolicy, call_with_retries

MAX_PAGE_SIZE = 100
CAMPAIGN_TYPES = {"sp", "sb", "sd"}

# caller filter key -> upstream query parameter (list values are comma-joined)
_FILTER_PARAMS = {
    "state": "stateFilter",
    "name": "name",
    "campaign_id_filter": "campaignIdFilter",
    "ad_group_id_filter": "adGroupIdFilter",
    "keyword_id_filter": "keywordIdFilter",
    "ad_id_filter": "adIdFilter",
    "match_type": "matchTypeFilter",
}


def paging_params(paging: Optional[Dict[str, Any]] = None) -> Dict[str, int]:
    paging = paging or {}
    start_index = int(paging.get("start_index") or 0)
    count = int(paging.get("count") or MAX_PAGE_SIZE)
    return {"startIndex": max(0, start_index), "count": max(1, min(count, MAX_PAGE_SIZE))}


def filter_params(filters: Optional[Dict[str, Any]], allowed: List[str]) -> Dict[str, str]:
    params = {}
    for key in allowed:
        value = (filters or {}).get(key)
        if value in (None, "", []):
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        params[_FILTER_PARAMS[key]] = value
    return params


def _list(client: AmazonAdsClient, path: str, scope: RequestScope, params: Dict[str, Any],
          policy: RetryPolicy = DEFAULT_POLICY) -> List[Dict[str, Any]]:
    data = call_with_retries(lambda: client.get(path, params, scope=scope), policy)
    if not isinstance(data, list):
        raise UpstreamContractError(f"Expected a list from {path}, got {type(data).__name__}")
    return data


def fetch_profiles(client: AmazonAdsClient, policy: RetryPolicy = DEFAULT_POLICY) -> List[Dict[str, Any]]:
    return _list(client, "/v2/profiles", UNSCOPED, {}, policy)


def fetch_campaigns(
    client: AmazonAdsClient,
    scope: RequestScope,
    campaign_type: str = "sp",
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    scope.require("campaigns API")
    params = paging_params(paging)
    params.update(filter_params(filters, ["state", "campaign_id_filter", "name"]))
    return _list(client, f"/v2/{campaign_type}/campaigns", scope, params)


def fetch_ad_groups(
    client: AmazonAdsClient,
    scope: RequestScope,
    campaign_type: str = "sp",
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    scope.require("ad groups API")
    params = paging_params(paging)
    params.update(filter_params(filters, ["state", "campaign_id_filter", "ad_group_id_filter", "name"]))
    return _list(client, f"/v2/{campaign_type}/adGroups", scope, params)


def fetch_keywords(
    client: AmazonAdsClient,
    scope: RequestScope,
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    scope.require("keywords API")
    params = paging_params(paging)
    params.update(filter_params(
        filters, ["state", "campaign_id_filter", "ad_group_id_filter", "keyword_id_filter", "match_type"]
    ))
    return _list(client, "/v2/sp/keywords", scope, params)


def fetch_product_ads(
    client: AmazonAdsClient,
    scope: RequestScope,
    filters: Optional[Dict[str, Any]] = None,
    paging: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    scope.require("product ads API")
    params = paging_params(paging)
    params.update(filter_params(filters, ["state", "campaign_id_filter", "ad_group_id_filter", "ad_id_filter"]))
    return _list(client, "/v2/sp/productAds", scope, params)
