from datetime import datetime, timezone

import pytest
import requests

from gsa_feed import transport
from gsa_feed.config import PushConfig
from gsa_feed.models import ContentEntity


class FakeResponse:
    def __init__(self, status_code=200, text="Success"):
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error", response=self)


@pytest.fixture
def push_config():
    return PushConfig.for_host(
        "gsa.example.com",
        username="admin",
        password="secret",
        whitelist=("article", "news_link"),
    )


@pytest.fixture
def article():
    return ContentEntity(
        id=12,
        bundle="article",
        title="Hello",
        internal_path="node/12",
        canonical_url="/news/hello",
        changed=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def fake_post(monkeypatch):
    """Replace requests.post in the transport and record each call."""
    calls = []
    response = FakeResponse()

    def post(url, **kwargs):
        calls.append({"url": url, **kwargs})
        return response

    monkeypatch.setattr(transport.requests, "post", post)
    post.calls = calls
    post.response = response
    return post
