"""Feed client tying entity resolution, feed building and delivery together."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .config import PushConfig
from .feed import build_feed, records_from_entities
from .models import (
    ContentEntity,
    ENTITY_TYPE_NODE,
    FEED_ACTION_ADD,
    FEED_SOURCE_WEB,
    FEED_TYPE_INCREMENTAL,
    FeedEnvelope,
    validate_action,
    validate_feed_type,
)
from .transport import Credentials, PushResult, push_feed

logger = logging.getLogger(__name__)


def is_eligible(entity: ContentEntity, whitelist: Sequence[str]) -> bool:
    """Only whitelisted content (node) bundles are pushed."""
    if entity.entity_type != ENTITY_TYPE_NODE:
        return False
    if not whitelist:
        return False
    return entity.bundle in whitelist


class FeedClient:
    """Push content entities to a GSA device.

    ``http_host`` is the scheme and host of the site the entities live on,
    e.g. ``https://www.example.com``. It is used for the record URLs and is
    unrelated to the appliance host in ``config``.
    """

    def __init__(
        self,
        config: PushConfig,
        http_host: str,
        feed_type: str = FEED_TYPE_INCREMENTAL,
        data_source: str = FEED_SOURCE_WEB,
        raise_for_status: bool = True,
    ) -> None:
        self.config = config
        self.http_host = http_host
        self.raise_for_status = raise_for_status
        self._feed_type = validate_feed_type(feed_type)
        self._data_source = data_source

    @property
    def feed_type(self) -> str:
        return self._feed_type

    @feed_type.setter
    def feed_type(self, value: str) -> None:
        self._feed_type = validate_feed_type(value)

    @property
    def data_source(self) -> str:
        return self._data_source

    @data_source.setter
    def data_source(self, value: str) -> None:
        self._data_source = value

    @property
    def credentials(self) -> Credentials:
        return Credentials(self.config.username, self.config.password)

    def push_handler(self, entity: ContentEntity, action: str) -> None:
        """Push the entity if it passes the whitelist gate."""
        if not is_eligible(entity, self.config.whitelist):
            logger.debug(
                "Skipping %s:%s (bundle '%s') - not eligible for push",
                entity.entity_type,
                entity.id,
                entity.bundle,
            )
            return
        self.push_entity(entity, action)

    def push_entity(
        self, entity: ContentEntity, action: str = FEED_ACTION_ADD
    ) -> Optional[PushResult]:
        return self.push(self.create_feed([entity], action))

    def push_multiple_entities(
        self, entities: Iterable[ContentEntity], action: str = FEED_ACTION_ADD
    ) -> Optional[PushResult]:
        return self.push(self.create_feed(entities, action))

    def create_feed(
        self, entities: Iterable[ContentEntity], action: str = FEED_ACTION_ADD
    ) -> str:
        """Return the feed XML for the given entities."""
        validate_action(action)
        envelope = FeedEnvelope(
            datasource=self._data_source,
            feedtype=self._feed_type,
            records=records_from_entities(entities, self.http_host, action),
        )
        return build_feed(envelope, self.config.dtd_system_id)

    def push(self, data: str) -> Optional[PushResult]:
        """Deliver an already built feed document."""
        return push_feed(
            self.config.endpoint,
            data,
            self._feed_type,
            self._data_source,
            credentials=self.credentials,
            raise_for_status=self.raise_for_status,
        )
