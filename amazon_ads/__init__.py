"""Amazon Advertising API core: scoped client, retries, report workflow and metrics."""
from amazon_ads.client import AmazonAdsClient, Credentials, RequestScope
from amazon_ads.errors import AmazonAdsError, ErrorCategory, ErrorKind

__all__ = [
    "AmazonAdsClient",
    "AmazonAdsError",
    "Credentials",
    "ErrorCategory",
    "ErrorKind",
    "RequestScope",
]
