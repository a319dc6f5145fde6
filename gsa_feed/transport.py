"""HTTP delivery of feed documents to the search appliance."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from requests.auth import HTTPBasicAuth

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10
READ_TIMEOUT = 120


class FeedPushError(RuntimeError):
    """Any failure to deliver a feed: network, timeout or HTTP error status."""


@dataclass(frozen=True)
class Credentials:
    username: Optional[str] = None
    password: Optional[str] = None

    def as_auth(self) -> Optional[HTTPBasicAuth]:
        """Return basic auth only when both parts are set."""
        if not self.username or not self.password:
            return None
        return HTTPBasicAuth(self.username, self.password)


@dataclass
class PushResult:
    """Response received from the feed endpoint."""

    status_code: int
    body: str


def send_feed(
    endpoint: str,
    payload: str,
    feed_type: str,
    data_source: str,
    credentials: Optional[Credentials] = None,
    raise_for_status: bool = True,
) -> PushResult:
    """POST the feed as multipart form data and return the response."""
    # The appliance expects plain form fields, not file uploads.
    fields = [
        ("feedtype", (None, feed_type)),
        ("datasource", (None, data_source)),
        ("data", (None, payload)),
    ]
    auth = credentials.as_auth() if credentials else None

    logger.debug("Pushing %s feed for '%s' to %s", feed_type, data_source, endpoint)
    try:
        response = requests.post(
            endpoint,
            files=fields,
            auth=auth,
            timeout=(CONNECT_TIMEOUT, READ_TIMEOUT),
        )
        if raise_for_status:
            response.raise_for_status()
    except requests.RequestException as exc:
        raise FeedPushError(str(exc)) from exc

    return PushResult(status_code=response.status_code, body=response.text)


def push_feed(
    endpoint: str,
    payload: str,
    feed_type: str,
    data_source: str,
    credentials: Optional[Credentials] = None,
    raise_for_status: bool = True,
) -> Optional[PushResult]:
    """Send the feed and log the outcome; delivery failures are not raised."""
    try:
        result = send_feed(
            endpoint,
            payload,
            feed_type,
            data_source,
            credentials=credentials,
            raise_for_status=raise_for_status,
        )
    except FeedPushError as exc:
        logger.error("GSA Feed Exception: %s", exc)
        return None

    logger.info(
        "GSA feed push response: responseCode=%s responseMessage=%s",
        result.status_code,
        result.body,
    )
    return result
