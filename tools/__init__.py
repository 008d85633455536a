"""Tool modules for the Amazon Ads MCP Server; importing them registers the tools."""
from tools.campaigns import get_ad_groups, get_campaigns
from tools.health import healthcheck
from tools.keywords import get_keywords, get_product_ads
from tools.profiles import get_profiles
from tools.reporting import amazon_ads_reference, get_reports

TOOLS = (
    get_profiles,
    get_campaigns,
    get_ad_groups,
    get_keywords,
    get_product_ads,
    get_reports,
    healthcheck,
)
