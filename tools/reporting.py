"""Reporting tools for Amazon Ads MCP Server."""
import logging
from typing import Any, Dict, List, Optional

from fastmcp import Context

from amazon_ads.credentials import client_from_user_credentials
from amazon_ads.dates import is_valid_compact_date
from amazon_ads.errors import ValidationError
from amazon_ads.metrics import EntityLevel, normalize_rows, summarize
from amazon_ads.reporting import DEFAULT_METRICS, ReportRequest, generate_report
from mcp_instance import mcp
from tools.common import check_campaign_type, run_tool

logger = logging.getLogger(__name__)

VALID_TIME_UNITS = {"SUMMARY", "DAILY"}


def _check_date_range(date_range: Optional[Dict[str, str]]) -> Dict[str, str]:
    if not date_range or not date_range.get("start_date") or not date_range.get("end_date"):
        raise ValidationError("date_range with start_date and end_date is required")
    start_date, end_date = str(date_range["start_date"]), str(date_range["end_date"])
    for name, value in (("start_date", start_date), ("end_date", end_date)):
        if not is_valid_compact_date(value):
            raise ValidationError(f"Invalid {name} '{value}'. Expected YYYYMMDD")
    if start_date > end_date:
        raise ValidationError(f"start_date {start_date} is after end_date {end_date}")
    return {"start_date": start_date, "end_date": end_date}


def _build_report(user_credentials, report_type, campaign_type, date_range, metrics, filters,
                  time_unit) -> Dict[str, Any]:
    campaign_type = check_campaign_type(campaign_type)
    report_type = report_type or EntityLevel.CAMPAIGN.value
    time_unit = (time_unit or "SUMMARY").upper()
    if time_unit not in VALID_TIME_UNITS:
        raise ValidationError(f"Invalid time_unit '{time_unit}'. Must be one of: {', '.join(sorted(VALID_TIME_UNITS))}")

    dates = _check_date_range(date_range)

    with client_from_user_credentials(user_credentials) as client:
        scope = client.scope()
        scope.require("reports API")

        logger.info("Generating %s report for profile %s", report_type, scope.profile_id)
        request = ReportRequest(
            report_type=report_type,
            campaign_type=campaign_type,
            start_date=dates["start_date"],
            end_date=dates["end_date"],
            metrics=metrics or list(DEFAULT_METRICS),
            time_unit=time_unit,
            filters=filters,
        )
        result = generate_report(client, request, scope)

    report_data = normalize_rows(result.rows)
    logger.info("Report generated with %d rows", len(report_data))
    return {
        "report_data": report_data,
        "summary": summarize(report_data),
        "date_range": dates,
        "profile_id": scope.profile_id,
        "report_id": result.job.report_id,
        "currency": "USD",
    }


@mcp.tool
async def get_reports(
    user_credentials: Dict[str, Any],
    date_range: Dict[str, str],
    report_type: str = "campaigns",
    campaign_type: str = "sp",
    metrics: Optional[List[str]] = None,
    filters: Optional[Dict[str, Any]] = None,
    time_unit: str = "SUMMARY",
    ctx: Context = None,
) -> Dict[str, Any]:
    """Generate and retrieve performance reports with metrics (ACOS, ROAS, CTR, etc.).

    The report is generated asynchronously upstream; this tool submits it, polls
    until it is ready (about 60 seconds at most) and downloads the rows.

    Args:
        user_credentials: Session token or access_token/client_id; profile_id is required
        date_range: {"start_date": "YYYYMMDD", "end_date": "YYYYMMDD"}
        report_type: campaigns, adGroups, keywords or productAds (default: campaigns)
        campaign_type: sp, sb or sd (default: sp)
        metrics: Metric names to request (default: impressions, clicks, cost,
            attributedSales14d, attributedConversions14d)
        filters: Optional {"state": ..., "campaign_id": [...]}
        time_unit: SUMMARY or DAILY (default: SUMMARY)

    Returns:
        Normalized rows (entity, impressions, clicks, cost, sales, orders, ctr, cpc,
        acos, roas) plus a summary with overall ratios computed from the totals
    """
    if ctx:
        await ctx.info(f"Generating {report_type} report ({campaign_type})...")

    result = await run_tool(
        "get_reports", _build_report,
        user_credentials, report_type, campaign_type, date_range, metrics, filters, time_unit,
        ctx=ctx,
    )

    if ctx:
        await ctx.info(f"Report {result['report_id']} returned {len(result['report_data'])} rows.")
    return result


@mcp.resource("amazon-ads://reference")
def amazon_ads_reference() -> str:
    """Amazon Ads reporting reference for tool callers."""
    report_types = "\n".join(f"- {level.value}" for level in EntityLevel)
    default_metrics = ", ".join(DEFAULT_METRICS)
    return f"""Amazon Ads reporting reference

## Campaign types
- sp: Sponsored Products
- sb: Sponsored Brands
- sd: Sponsored Display

## Report types
{report_types}

## Dates
All report dates are YYYYMMDD strings with no separators and no timezone,
e.g. {{"start_date": "20240101", "end_date": "20240131"}}.

## Default metrics
{default_metrics}

## Derived metrics (all 0 when the denominator is 0)
- ctr = clicks / impressions
- cpc = cost / clicks
- acos = cost / sales   (lower is better)
- roas = sales / cost   (higher is better)

Summary ratios are recomputed from the totals, not averaged per row.

## Errors
Tool errors are JSON: {{"type": "VALIDATION" | "UPSTREAM" | "TIMEOUT", "kind", "message",
"upstream_code", "code"}}. VALIDATION errors mean the input must change;
TIMEOUT means the report was still generating when polling stopped."""
