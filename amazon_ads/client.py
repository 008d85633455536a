"""Scoped HTTP client for the Amazon Advertising API."""
import gzip
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from amazon_ads import config
from amazon_ads.errors import (
    AuthError,
    ForbiddenError,
    RateLimitedError,
    TransportError,
    UpstreamApplicationError,
    UpstreamContractError,
    UpstreamServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)

CLIENT_ID_HEADER = "Amazon-Advertising-API-ClientId"
SCOPE_HEADER = "Amazon-Advertising-API-Scope"


@dataclass(frozen=True)
class Credentials:
    access_token: str
    client_id: str
    profile_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(client_id={self.client_id!r}, profile_id={self.profile_id!r})"


@dataclass(frozen=True)
class RequestScope:
    """Account scope attached to a single call."""

    profile_id: Optional[str] = None

    @property
    def is_bound(self) -> bool:
        return bool(self.profile_id)

    def require(self, what: str = "this operation") -> str:
        if not self.profile_id:
            raise ValidationError(f"profile_id is required in user_credentials for {what}")
        return self.profile_id

    def headers(self) -> Dict[str, str]:
        return {SCOPE_HEADER: str(self.profile_id)} if self.profile_id else {}


UNSCOPED = RequestScope()


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        # HTTP-date form is not used by this API
        return None
    if not math.isfinite(seconds):
        return None
    return max(0.0, seconds)


def _error_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def raise_for_status(resp: requests.Response) -> None:
    """Translate an error response into a classified exception."""
    status = resp.status_code
    if status < 400:
        return

    if status == 401:
        raise AuthError("Invalid or expired access token", http_status=status)
    if status == 403:
        raise ForbiddenError("Access forbidden - check profile_id and permissions", http_status=status)
    if status == 429:
        raise RateLimitedError(_parse_retry_after(resp.headers.get("Retry-After")), http_status=status)
    if status >= 500:
        raise UpstreamServerError("Amazon API server error. Please try again later", http_status=status)

    body = _error_body(resp)
    if isinstance(body, dict) and body.get("code"):
        raise UpstreamApplicationError(str(body["code"]), body.get("details"), http_status=status)
    text = body if isinstance(body, str) else json.dumps(body)
    raise UpstreamApplicationError(f"HTTP_{status}", text[:500] or resp.reason, http_status=status)


def decode_payload(resp: requests.Response) -> Any:
    """Decode a JSON body; report files may arrive gzip-compressed without Content-Encoding."""
    content = resp.content
    if not content:
        return {}
    if content[:2] == b"\x1f\x8b":
        content = gzip.decompress(content)
    try:
        return json.loads(content)
    except ValueError as e:
        raise UpstreamContractError(
            f"Upstream returned a non-JSON body ({resp.headers.get('Content-Type', 'unknown type')})",
            http_status=resp.status_code,
        ) from e


class AmazonAdsClient:
    """Authenticated client bound to one set of credentials.

    The bearer token and client id are fixed for the lifetime of the client.
    The account scope is never stored on the client; it travels with each
    call as a ``RequestScope`` so one client can serve several profiles.
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = config.AMAZON_ADS_API_URL,
        timeout: float = config.REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {credentials.access_token}",
            CLIENT_ID_HEADER: credentials.client_id,
            "Content-Type": "application/json",
        })

    def scope(self, profile_id: Optional[str] = None) -> RequestScope:
        """Scope for a call: the explicit profile, else the one the credentials carry."""
        return RequestScope(profile_id or self.credentials.profile_id)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _send(self, method: str, url: str, scope: RequestScope, **kwargs) -> requests.Response:
        headers = scope.headers()
        headers.update(kwargs.pop("headers", None) or {})
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        logger.debug("%s %s -> %s", method, url, resp.status_code)
        raise_for_status(resp)
        return resp

    def request(
        self,
        method: str,
        path: str,
        scope: RequestScope = UNSCOPED,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        resp = self._send(method, url, scope, params=params, json=body)
        return decode_payload(resp)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, scope: RequestScope = UNSCOPED) -> Any:
        return self.request("GET", path, scope, params=params)

    def post(self, path: str, body: Optional[Any] = None, scope: RequestScope = UNSCOPED) -> Any:
        return self.request("POST", path, scope, body=body)

    def put(self, path: str, body: Optional[Any] = None, scope: RequestScope = UNSCOPED) -> Any:
        return self.request("PUT", path, scope, body=body)

    def delete(self, path: str, scope: RequestScope = UNSCOPED) -> Any:
        return self.request("DELETE", path, scope)

    def download(self, url: str, scope: RequestScope = UNSCOPED) -> Any:
        """Fetch an absolute download location (e.g. a report file).

        Credentials and scope are only sent when the location is on the API host.
        """
        headers = {"Accept": "application/json"}
        if urlparse(url).netloc != urlparse(self.base_url).netloc:
            # None drops the session-level header for this request
            headers.update({"Authorization": None, CLIENT_ID_HEADER: None, "Content-Type": None})
            scope = UNSCOPED
        resp = self._send("GET", url, scope, headers=headers)
        return decode_payload(resp)
