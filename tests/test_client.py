from xml.etree import ElementTree as ET

import pytest

from gsa_feed.client import FeedClient, is_eligible
from gsa_feed.config import PushConfig
from gsa_feed.models import ContentEntity
from gsa_feed.urls import EntityResolutionError

HOST = "https://www.example.com"


def _entity(bundle, entity_type="node", entity_id=1):
    return ContentEntity(
        id=entity_id,
        bundle=bundle,
        entity_type=entity_type,
        internal_path=f"node/{entity_id}",
        canonical_url=f"/{bundle}/{entity_id}",
        changed=1704067200,
    )


def _feed_of(call):
    data = dict(call["files"])["data"][1]
    return ET.fromstring(data.encode("utf-8"))


def test_is_eligible_checks_whitelist():
    whitelist = ["a", "b"]

    assert is_eligible(_entity("a"), whitelist)
    assert not is_eligible(_entity("c"), whitelist)
    assert not is_eligible(_entity("a", entity_type="taxonomy_term"), whitelist)
    assert not is_eligible(_entity("a"), [])


def test_push_handler_skips_non_whitelisted_bundle(fake_post):
    config = PushConfig.for_host("gsa.example.com", whitelist=("a", "b"))
    client = FeedClient(config, HOST)

    client.push_handler(_entity("c"), "add")

    assert fake_post.calls == []


def test_push_handler_pushes_whitelisted_bundle(fake_post):
    config = PushConfig.for_host("gsa.example.com", whitelist=("a", "b"))
    client = FeedClient(config, HOST)

    client.push_handler(_entity("a"), "add")

    assert len(fake_post.calls) == 1
    assert fake_post.calls[0]["url"] == "http://gsa.example.com:19900/xmlfeed"


def test_push_handler_with_empty_whitelist_is_noop(fake_post):
    client = FeedClient(PushConfig.for_host("gsa.example.com"), HOST)

    client.push_handler(_entity("a"), "add")

    assert fake_post.calls == []


def test_push_entity_delete_sends_delete_record(fake_post, push_config, article):
    client = FeedClient(push_config, HOST)

    client.push_entity(article, "delete")

    call = fake_post.calls[0]
    feed = _feed_of(call)
    assert feed.find("group/record").get("action") == "delete"
    assert dict(call["files"])["feedtype"] == (None, "incremental")
    assert dict(call["files"])["datasource"] == (None, "web")


def test_push_multiple_entities_single_request(fake_post, push_config):
    client = FeedClient(push_config, HOST, feed_type="full")
    entities = [_entity("article", entity_id=i) for i in (1, 2, 3)]

    client.push_multiple_entities(entities)

    assert len(fake_post.calls) == 1
    feed = _feed_of(fake_post.calls[0])
    assert len(feed.findall("group/record")) == 3
    assert feed.findtext("header/feedtype") == "full"


def test_create_feed_uses_configured_system_id(push_config, article):
    client = FeedClient(push_config, HOST)

    xml_text = client.create_feed([article])

    assert '"http://gsa.example.com:7800/gsafeed.dtd"' in xml_text


def test_feed_type_setter_validates(push_config):
    client = FeedClient(push_config, HOST)

    client.feed_type = "metadata-and-url"
    assert client.feed_type == "metadata-and-url"

    with pytest.raises(ValueError, match="'bogus' is invalid"):
        client.feed_type = "bogus"
    assert client.feed_type == "metadata-and-url"


def test_constructor_rejects_invalid_feed_type(push_config):
    with pytest.raises(ValueError):
        FeedClient(push_config, HOST, feed_type="nope")


def test_create_feed_rejects_invalid_action(push_config, article):
    with pytest.raises(ValueError):
        FeedClient(push_config, HOST).create_feed([article], "update")


def test_resolution_error_aborts_push(fake_post, push_config):
    broken = ContentEntity(id=9, bundle="article", changed=0, internal_path="node/9")

    with pytest.raises(EntityResolutionError):
        FeedClient(push_config, HOST).push_entity(broken)

    assert fake_post.calls == []


def test_push_credentials_come_from_config(fake_post, push_config, article):
    FeedClient(push_config, HOST).push_entity(article)

    auth = fake_post.calls[0]["auth"]
    assert (auth.username, auth.password) == ("admin", "secret")


def test_push_failure_does_not_raise(monkeypatch, push_config, article, caplog):
    import requests

    from gsa_feed import transport

    def failing_post(url, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(transport.requests, "post", failing_post)

    assert FeedClient(push_config, HOST).push_entity(article) is None
    assert "unreachable" in caplog.text
