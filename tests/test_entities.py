import pytest

from amazon_ads.client import RequestScope
from amazon_ads.entities import (
    fetch_ad_groups,
    fetch_campaigns,
    fetch_keywords,
    fetch_product_ads,
    fetch_profiles,
    filter_params,
    paging_params,
)
from amazon_ads.errors import UpstreamContractError, ValidationError
from conftest import make_response


def test_paging_defaults_and_cap():
    assert paging_params() == {"startIndex": 0, "count": 100}
    assert paging_params({"start_index": 200, "count": 500}) == {"startIndex": 200, "count": 100}
    assert paging_params({"count": 25}) == {"startIndex": 0, "count": 25}


def test_filter_params_joins_lists_and_skips_empty():
    params = filter_params(
        {"state": "enabled", "campaign_id_filter": [1, 2], "name": "", "match_type": "exact"},
        ["state", "campaign_id_filter", "name"],
    )
    assert params == {"stateFilter": "enabled", "campaignIdFilter": "1,2"}


def test_fetch_profiles_is_unscoped(client, session):
    session.add(make_response(200, [{"profileId": 1}]))
    assert fetch_profiles(client) == [{"profileId": 1}]
    assert "Amazon-Advertising-API-Scope" not in session.calls[0]["headers"]
    assert session.calls[0]["url"] == "https://api.test/v2/profiles"


def test_fetch_campaigns(client, session):
    session.add(make_response(200, [{"campaignId": 1}]))

    fetch_campaigns(client, client.scope(), "sb", {"state": "paused"}, {"count": 10})

    call = session.calls[0]
    assert call["url"] == "https://api.test/v2/sb/campaigns"
    assert call["params"] == {"startIndex": 0, "count": 10, "stateFilter": "paused"}
    assert call["headers"]["Amazon-Advertising-API-Scope"] == "123456"


def test_fetch_ad_groups_keywords_and_product_ads(client, session):
    session.add(make_response(200, []), make_response(200, []), make_response(200, []))

    fetch_ad_groups(client, client.scope(), filters={"campaign_id_filter": ["5"]})
    fetch_keywords(client, client.scope(), filters={"match_type": "broad"})
    fetch_product_ads(client, client.scope(), filters={"ad_id_filter": [8, 9]})

    assert [c["url"] for c in session.calls] == [
        "https://api.test/v2/sp/adGroups",
        "https://api.test/v2/sp/keywords",
        "https://api.test/v2/sp/productAds",
    ]
    assert session.calls[0]["params"]["campaignIdFilter"] == "5"
    assert session.calls[1]["params"]["matchTypeFilter"] == "broad"
    assert session.calls[2]["params"]["adIdFilter"] == "8,9"


@pytest.mark.parametrize("fetch", [fetch_campaigns, fetch_ad_groups, fetch_keywords, fetch_product_ads])
def test_scoped_listing_requires_profile(client, session, fetch):
    with pytest.raises(ValidationError):
        fetch(client, RequestScope())
    assert session.calls == []


def test_listing_must_be_a_list(client, session):
    session.add(make_response(200, {"campaigns": []}))
    with pytest.raises(UpstreamContractError):
        fetch_campaigns(client, client.scope())
