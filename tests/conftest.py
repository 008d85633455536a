import gzip
import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from amazon_ads.client import AmazonAdsClient, Credentials


def make_response(status_code=200, payload=None, headers=None, raw=None, gzipped=False):
    """Build an in-memory requests.Response."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = "https://api.test/"
    resp.reason = "Test"
    resp.encoding = "utf-8"
    resp.headers = CaseInsensitiveDict(headers or {})
    if raw is not None:
        content = raw
    elif payload is not None:
        content = json.dumps(payload).encode("utf-8")
    else:
        content = b""
    resp._content = gzip.compress(content) if gzipped else content
    return resp


class FakeSession:
    """Stands in for requests.Session: records calls and replays queued responses."""

    def __init__(self, *responses):
        self.headers = {}
        self.queue = list(responses)
        self.calls = []
        self.closed = False

    def add(self, *responses):
        self.queue.extend(responses)

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "timeout": timeout,
            "params": kwargs.get("params"),
            "json": kwargs.get("json"),
        })
        if not self.queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return AmazonAdsClient(
        Credentials("test-token", "test-client", "123456"),
        base_url="https://api.test",
        session=session,
    )


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def legacy_credentials():
    return {"access_token": "test-token", "client_id": "test-client", "profile_id": "123456"}


class FakeContext:
    """Collects what a tool reports through the MCP context."""

    def __init__(self):
        self.infos = []
        self.errors = []

    async def info(self, message):
        self.infos.append(message)

    async def error(self, message):
        self.errors.append(message)


@pytest.fixture
def ctx():
    return FakeContext()
