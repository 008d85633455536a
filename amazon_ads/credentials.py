"""Resolve caller-supplied ``user_credentials`` into an authenticated client.

Two modes:

* session mode: ``{"sessionToken": ...}`` is exchanged with the backend for
  the platform's OAuth tokens;
* direct mode (legacy): ``{"access_token", "client_id", "profile_id"?}``.
"""
import logging
from typing import Any, Dict, Optional

import requests

from amazon_ads import config
from amazon_ads.client import AmazonAdsClient, Credentials
from amazon_ads.errors import CredentialError, ValidationError

logger = logging.getLogger(__name__)


def retrieve_platform_tokens(
    user_credentials: Dict[str, Any],
    platform: str = config.PLATFORM_NAME,
    token_endpoint: str = config.TOKEN_ENDPOINT,
    timeout: float = config.TOKEN_REQUEST_TIMEOUT,
) -> Dict[str, Any]:
    """Exchange a session token for platform tokens."""
    session_token = user_credentials.get("sessionToken")
    if not session_token:
        if user_credentials.get("access_token"):
            logger.warning("Using legacy access_token (deprecated - use sessionToken)")
            return {"access_token": user_credentials["access_token"]}
        raise ValidationError("Missing sessionToken in user_credentials")

    logger.info("Fetching %s tokens from backend...", platform)
    try:
        resp = requests.post(
            token_endpoint,
            json={"sessionToken": session_token, "platform": platform},
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise CredentialError(f"Failed to retrieve tokens from backend: {e}") from e

    try:
        data = resp.json()
    except ValueError:
        data = {}
    message = data.get("error") if isinstance(data, dict) else None

    if resp.status_code == 404:
        raise CredentialError(
            f"Session not found or no {platform} connection available. "
            "User may need to reconnect their account.",
            http_status=404,
        )
    if resp.status_code == 400:
        raise CredentialError(f"Invalid session token or platform: {message or resp.reason}", http_status=400)
    if not resp.ok:
        logger.error("Backend token API error: status=%s platform=%s", resp.status_code, platform)
        raise CredentialError(
            f"Failed to retrieve tokens from backend: {message or resp.reason}",
            http_status=resp.status_code,
        )

    if not isinstance(data, dict) or not data.get("success"):
        raise CredentialError(message or "Failed to retrieve tokens")
    tokens = data.get("tokens") or {}
    if not tokens.get("access_token"):
        raise CredentialError(f"No access token available for platform: {platform}")

    logger.info("Successfully retrieved %s tokens", platform)
    return tokens


def resolve_credentials(user_credentials: Optional[Dict[str, Any]]) -> Credentials:
    if not user_credentials:
        raise ValidationError("Missing user_credentials")

    if user_credentials.get("sessionToken"):
        logger.info("Using session-based token retrieval")
        tokens = retrieve_platform_tokens(user_credentials)
        client_id = tokens.get("client_id") or user_credentials.get("client_id")
        if not client_id:
            raise ValidationError("Missing client_id in tokens or user_credentials")
        profile_id = tokens.get("profile_id") or user_credentials.get("profile_id")
        return Credentials(tokens["access_token"], str(client_id), str(profile_id) if profile_id else None)

    logger.info("Using legacy direct token mode (deprecated)")
    if not user_credentials.get("access_token"):
        raise ValidationError("Missing access_token in user_credentials")
    if not user_credentials.get("client_id"):
        raise ValidationError("Missing client_id in user_credentials")
    profile_id = user_credentials.get("profile_id")
    return Credentials(
        user_credentials["access_token"],
        str(user_credentials["client_id"]),
        str(profile_id) if profile_id else None,
    )


def client_from_user_credentials(user_credentials: Optional[Dict[str, Any]]) -> AmazonAdsClient:
    return AmazonAdsClient(resolve_credentials(user_credentials))
