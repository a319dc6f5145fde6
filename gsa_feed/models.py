"""Shared data models for gsa_feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

# When the feed type is "full" the appliance drops every URL previously
# associated with the data source and replaces them with the feed contents.
# Pushing an empty full feed deletes the whole data source.
FEED_TYPE_FULL = "full"
# Only the URLs in the feed are modified, according to each record's action.
FEED_TYPE_INCREMENTAL = "incremental"
# Like incremental, but the appliance schedules a re-crawl unless the record
# asks for crawl-immediately.
FEED_TYPE_METADATA_AND_URL = "metadata-and-url"

FEED_TYPES = (FEED_TYPE_FULL, FEED_TYPE_INCREMENTAL, FEED_TYPE_METADATA_AND_URL)

FEED_ACTION_ADD = "add"
FEED_ACTION_DELETE = "delete"
FEED_ACTIONS = (FEED_ACTION_ADD, FEED_ACTION_DELETE)

FEED_SOURCE_WEB = "web"

FEED_ROOT_ELEMENT = "gsafeed"
FEED_PUBLIC_ID = "-//Google//DTD GSA Feeds//EN"

ENTITY_TYPE_NODE = "node"
NEWS_LINK_BUNDLE = "news_link"

RECORD_MIMETYPE = "text/html"
RECORD_AUTHMETHOD = "httpsso"


def validate_feed_type(feed_type: str) -> str:
    if feed_type not in FEED_TYPES:
        raise ValueError(f"The given feed type '{feed_type}' is invalid.")
    return feed_type


def validate_action(action: str) -> str:
    if action not in FEED_ACTIONS:
        raise ValueError(f"The given feed action '{action}' is invalid.")
    return action


@dataclass
class ContentEntity:
    """Snapshot of a CMS content entity taken when a push is triggered."""

    id: int
    bundle: str
    changed: Union[datetime, int, float]
    title: str = ""
    internal_path: Optional[str] = None
    canonical_url: Optional[str] = None
    link_uri: Optional[str] = None
    entity_type: str = ENTITY_TYPE_NODE


@dataclass(frozen=True)
class FeedRecord:
    """A single <record> element of a content feed."""

    url: str
    displayurl: str
    last_modified: str
    action: str = FEED_ACTION_ADD
    mimetype: str = RECORD_MIMETYPE
    crawl_immediately: bool = True
    authmethod: str = RECORD_AUTHMETHOD

    def __post_init__(self) -> None:
        validate_action(self.action)


@dataclass
class FeedEnvelope:
    """The whole feed document: header values plus the ordered records."""

    datasource: str
    feedtype: str
    records: List[FeedRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_feed_type(self.feedtype)
