import asyncio
import json

import pytest
from fastmcp.exceptions import ToolError

from amazon_ads.errors import AuthError, RateLimitedError, ReportTimeoutError, UpstreamServerError
from amazon_ads.metrics import EntityLevel, ReportRow
from amazon_ads.reporting import JobStatus, ReportJob, ReportResult
from tools.campaigns import get_campaigns
from tools.health import healthcheck
from tools.keywords import get_keywords
from tools.profiles import get_profiles
from tools.reporting import amazon_ads_reference, get_reports

JANUARY = {"start_date": "20240101", "end_date": "20240131"}


def error_payload(exc_info):
    return json.loads(str(exc_info.value))


@pytest.fixture
def fake_report(monkeypatch):
    """Replace the report workflow; records the request it was given."""
    seen = {}

    def fake_generate_report(client, request, scope):
        seen["request"] = request
        seen["profile_id"] = scope.profile_id
        job = ReportJob("r-1", status=JobStatus.SUCCESS, location="https://dl.test/r-1", polls=3)
        rows = [
            ReportRow(EntityLevel.CAMPAIGN, {"campaignId": 1, "campaignName": "A", "impressions": 100,
                                             "clicks": 10, "cost": 5.0, "attributedSales14d": 50.0,
                                             "attributedConversions14d": 2}),
            ReportRow(EntityLevel.CAMPAIGN, {"campaignId": 2, "campaignName": "B", "impressions": 200,
                                             "clicks": 20, "cost": 10.0, "attributedSales14d": 100.0,
                                             "attributedConversions14d": 3}),
        ]
        return ReportResult(job=job, rows=rows)

    monkeypatch.setattr("tools.reporting.generate_report", fake_generate_report)
    return seen


def test_get_reports(legacy_credentials, fake_report, ctx):
    result = asyncio.run(get_reports.fn(legacy_credentials, JANUARY, ctx=ctx))

    assert result["report_id"] == "r-1"
    assert result["profile_id"] == "123456"
    assert result["currency"] == "USD"
    assert result["date_range"] == JANUARY
    assert [row["entity_id"] for row in result["report_data"]] == ["1", "2"]
    assert result["summary"]["total_cost"] == 15.0
    assert result["summary"]["overall_roas"] == 10.0

    request = fake_report["request"]
    assert request.report_type == "campaigns"
    assert request.campaign_type == "sp"
    assert request.time_unit == "SUMMARY"
    assert request.metrics == ["impressions", "clicks", "cost", "attributedSales14d", "attributedConversions14d"]
    assert ctx.infos[-1] == "Report r-1 returned 2 rows."


@pytest.mark.parametrize("date_range", [
    None,
    {"start_date": "20240101"},
    {"start_date": "2024-01-01", "end_date": "20240131"},
    {"start_date": "20240201", "end_date": "20240101"},
])
def test_get_reports_rejects_bad_dates(legacy_credentials, fake_report, date_range):
    with pytest.raises(ToolError) as exc:
        asyncio.run(get_reports.fn(legacy_credentials, date_range))
    assert error_payload(exc)["type"] == "VALIDATION"
    assert "request" not in fake_report


def test_get_reports_rejects_bad_campaign_type(legacy_credentials, fake_report):
    with pytest.raises(ToolError) as exc:
        asyncio.run(get_reports.fn(legacy_credentials, JANUARY, campaign_type="xx"))
    assert "Invalid campaign_type" in error_payload(exc)["message"]


def test_get_reports_requires_profile(fake_report, ctx):
    credentials = {"access_token": "t", "client_id": "c"}
    with pytest.raises(ToolError) as exc:
        asyncio.run(get_reports.fn(credentials, JANUARY, ctx=ctx))
    assert error_payload(exc)["type"] == "VALIDATION"
    assert "request" not in fake_report
    assert ctx.errors


def test_get_reports_timeout_payload(legacy_credentials, monkeypatch):
    def timing_out(client, request, scope):
        raise ReportTimeoutError("r-1", 30)

    monkeypatch.setattr("tools.reporting.generate_report", timing_out)
    with pytest.raises(ToolError) as exc:
        asyncio.run(get_reports.fn(legacy_credentials, JANUARY))

    payload = error_payload(exc)
    assert payload["type"] == "TIMEOUT"
    assert payload["message"] == "Report generation timeout after 30 attempts"


def test_get_reports_upstream_payload(legacy_credentials, monkeypatch):
    def rate_limited(client, request, scope):
        raise RateLimitedError(retry_after=30)

    monkeypatch.setattr("tools.reporting.generate_report", rate_limited)
    with pytest.raises(ToolError) as exc:
        asyncio.run(get_reports.fn(legacy_credentials, JANUARY))

    payload = error_payload(exc)
    assert payload["type"] == "UPSTREAM"
    assert payload["kind"] == "RATE_LIMITED"
    assert payload["upstream_code"] == 429


def test_get_profiles(legacy_credentials, monkeypatch):
    monkeypatch.setattr("tools.profiles.fetch_profiles", lambda client: [
        {"profileId": 1, "countryCode": "US", "currencyCode": "USD", "timezone": "America/Los_Angeles",
         "accountInfo": {"marketplaceStringId": "ATVPDKIKX0DER", "name": "Store", "type": "seller"}},
        {"profileId": 2, "countryCode": "DE", "currencyCode": "EUR", "accountInfo": {}},
    ])

    result = asyncio.run(get_profiles.fn(legacy_credentials))

    assert result["total_count"] == 2
    assert result["profiles"][0]["profile_id"] == "1"
    assert result["profiles"][0]["marketplace_id"] == "ATVPDKIKX0DER"
    assert result["profiles"][1]["name"] == "Profile 2"


def test_get_campaigns(legacy_credentials, monkeypatch):
    seen = {}

    def fake_fetch(client, scope, campaign_type, filters, paging):
        seen.update(campaign_type=campaign_type, profile_id=scope.profile_id)
        return [{"campaignId": 7, "name": "Brand", "state": "enabled", "dailyBudget": 20.0,
                 "creationDate": 1700000000000}]

    monkeypatch.setattr("tools.campaigns.fetch_campaigns", fake_fetch)

    result = asyncio.run(get_campaigns.fn(legacy_credentials, campaign_type="SB"))

    assert seen == {"campaign_type": "sb", "profile_id": "123456"}
    campaign = result["campaigns"][0]
    assert campaign["campaign_id"] == "7"
    assert campaign["campaign_type"] == "sponsoredBrands"
    assert campaign["creation_date"] == "2023-11-14T22:13:20.000Z"
    assert campaign["last_updated_date"] is None


def test_get_keywords_upstream_error(legacy_credentials, monkeypatch, ctx):
    def unauthorized(client, scope, filters, paging):
        raise AuthError("Invalid or expired access token", http_status=401)

    monkeypatch.setattr("tools.keywords.fetch_keywords", unauthorized)
    with pytest.raises(ToolError) as exc:
        asyncio.run(get_keywords.fn(legacy_credentials, ctx=ctx))

    assert error_payload(exc)["kind"] == "AUTH"
    assert ctx.errors == ["get_keywords failed: Invalid or expired access token"]


@pytest.mark.parametrize("outcome, status", [
    ([{"profileId": 1}, {"profileId": 2}], "healthy"),
    (UpstreamServerError("down", http_status=503), "degraded"),
    (RateLimitedError(), "degraded"),
    (AuthError("expired", http_status=401), "unhealthy"),
    (RuntimeError("boom"), "unhealthy"),
])
def test_healthcheck(legacy_credentials, monkeypatch, outcome, status):
    def fake_fetch(client, policy):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr("tools.health.fetch_profiles", fake_fetch)

    result = asyncio.run(healthcheck.fn(legacy_credentials))

    assert result["status"] == status
    assert result["api_connectivity"] is (status == "healthy")
    assert result["profile_count"] == (2 if status == "healthy" else 0)
    assert result["version"] == "1.0.0"


def test_healthcheck_without_credentials():
    result = asyncio.run(healthcheck.fn({}))
    assert result["status"] == "unhealthy"


def test_tools_are_registered():
    assert get_reports.name == "get_reports"
    assert healthcheck.name == "healthcheck"
    assert str(amazon_ads_reference.uri) == "amazon-ads://reference"


def test_reference_lists_report_types():
    text = amazon_ads_reference.fn()
    for level in EntityLevel:
        assert level.value in text
    assert "attributedSales14d" in text
