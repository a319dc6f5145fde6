"""Entity lifecycle hooks for the host application to call."""

from __future__ import annotations

import logging

from .client import FeedClient
from .models import ContentEntity, FEED_ACTION_ADD, FEED_ACTION_DELETE
from .urls import EntityResolutionError

logger = logging.getLogger(__name__)


def _dispatch(client: FeedClient, entity: ContentEntity, action: str) -> None:
    try:
        client.push_handler(entity, action)
    except EntityResolutionError:
        logger.exception(
            "Could not build feed record for %s:%s", entity.entity_type, entity.id
        )


def entity_insert(client: FeedClient, entity: ContentEntity) -> None:
    _dispatch(client, entity, FEED_ACTION_ADD)


def entity_update(client: FeedClient, entity: ContentEntity) -> None:
    _dispatch(client, entity, FEED_ACTION_ADD)


def entity_delete(client: FeedClient, entity: ContentEntity) -> None:
    _dispatch(client, entity, FEED_ACTION_DELETE)
