from datetime import datetime, timedelta, timezone

import pytest

from gsa_feed.models import ContentEntity
from gsa_feed.urls import (
    EntityResolutionError,
    display_url,
    format_last_modified,
    internal_url,
    resolve_link_uri,
)

HOST = "https://www.example.com"


def _entity(**kwargs):
    defaults = dict(
        id=5,
        bundle="article",
        internal_path="node/5",
        canonical_url="/articles/five",
        changed=0,
    )
    defaults.update(kwargs)
    return ContentEntity(**defaults)


def test_internal_url_prefixes_request_host():
    assert internal_url(_entity(), HOST) == "https://www.example.com/node/5"
    assert internal_url(_entity(internal_path="/node/5"), HOST + "/") == (
        "https://www.example.com/node/5"
    )


def test_internal_url_requires_path():
    with pytest.raises(EntityResolutionError):
        internal_url(_entity(internal_path=None), HOST)


def test_display_url_uses_canonical_route():
    assert display_url(_entity(), HOST) == "https://www.example.com/articles/five"


def test_display_url_keeps_absolute_canonical_url():
    entity = _entity(canonical_url="https://cdn.example.org/articles/five")

    assert display_url(entity, HOST) == "https://cdn.example.org/articles/five"


def test_display_url_missing_route_raises():
    with pytest.raises(EntityResolutionError):
        display_url(_entity(canonical_url=None), HOST)


def test_news_link_display_url_prefers_external_link():
    entity = _entity(bundle="news_link", link_uri="https://news.example.net/story?id=1")

    assert display_url(entity, HOST) == "https://news.example.net/story?id=1"


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("internal:/about/us", "https://www.example.com/about/us"),
        ("entity:node/3", "https://www.example.com/node/3"),
        ("base:files/report.html", "https://www.example.com/files/report.html"),
        ("/press", "https://www.example.com/press"),
    ],
)
def test_resolve_link_uri_makes_internal_links_absolute(uri, expected):
    assert resolve_link_uri(uri, HOST) == expected


def test_resolve_link_uri_rejects_route_uris():
    with pytest.raises(EntityResolutionError):
        resolve_link_uri("route:<front>", HOST)


def test_news_link_without_link_raises():
    with pytest.raises(EntityResolutionError):
        display_url(_entity(bundle="news_link", link_uri=None), HOST)


def test_format_last_modified_variants():
    expected = "2024-01-01T00:00:00Z"
    aware = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert format_last_modified(aware) == expected
    assert format_last_modified(datetime(2024, 1, 1)) == expected
    assert format_last_modified(int(aware.timestamp())) == expected
    shifted = datetime(2024, 1, 1, 2, tzinfo=timezone(timedelta(hours=2)))
    assert format_last_modified(shifted) == expected


def test_display_url_keeps_colon_in_first_path_segment():
    entity = _entity(canonical_url="/report:2024")

    assert display_url(entity, HOST) == "https://www.example.com/report:2024"


def test_internal_link_with_colon_stays_on_site():
    assert resolve_link_uri("internal:/a:b", HOST) == "https://www.example.com/a:b"


def test_protocol_relative_canonical_url_takes_host_scheme():
    entity = _entity(canonical_url="//cdn.example.org/five")

    assert display_url(entity, HOST) == "https://cdn.example.org/five"


def test_paths_are_percent_encoded():
    entity = _entity(canonical_url="/news/café au lait", internal_path="node/5")

    assert display_url(entity, HOST) == "https://www.example.com/news/caf%C3%A9%20au%20lait"
    assert resolve_link_uri("internal:/search?q=a b", HOST) == (
        "https://www.example.com/search?q=a%20b"
    )


def test_existing_escapes_are_not_double_encoded():
    entity = _entity(canonical_url="/news/caf%C3%A9")

    assert display_url(entity, HOST) == "https://www.example.com/news/caf%C3%A9"
