"""Bulk synchronisation of the content store with the search appliance."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from . import db
from .client import FeedClient, is_eligible
from .config import AppConfig
from .models import ContentEntity, FEED_ACTION_ADD, FEED_TYPE_FULL

logger = logging.getLogger(__name__)

MODE_PUSH = "push"
MODE_PURGE = "purge"
MODE_ENTITY = "entity"


@dataclass
class RunConfig:
    """Runtime options for a bulk run."""

    mode: str = MODE_PUSH
    feed_type: str = FEED_TYPE_FULL
    action: str = FEED_ACTION_ADD
    dry_run: bool = False
    output_path: Optional[str] = None
    entity_id: Optional[int] = None


@dataclass
class RunResult:
    """Returned data after a bulk run."""

    output_text: str
    record_count: int
    pushed: bool


def _save_feed_to_file(path: str, feed: str) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(feed, encoding="utf-8")
    logger.info("Saved feed to %s", location)


def _load_entities(
    app_config: AppConfig, session_factory: Optional[Callable[[], Session]]
) -> List[ContentEntity]:
    whitelist = app_config.push.whitelist
    if not whitelist:
        raise RuntimeError("Content type whitelist is empty; nothing to synchronise.")
    if session_factory is None:
        raise RuntimeError("No content database configured.")

    with session_factory() as session:
        return db.load_content_by_bundles(session, whitelist)


def _load_entity(
    entity_id: Optional[int],
    app_config: AppConfig,
    session_factory: Optional[Callable[[], Session]],
) -> ContentEntity:
    if entity_id is None:
        raise ValueError("An entity id is required to push a single entity.")
    if session_factory is None:
        raise RuntimeError("No content database configured.")

    with session_factory() as session:
        entity = db.get_content(session, entity_id)
    if entity is None:
        raise RuntimeError(f"Entity {entity_id} not found in the content store.")
    if not is_eligible(entity, app_config.push.whitelist):
        raise RuntimeError(
            f"Entity {entity_id} (bundle '{entity.bundle}') is not eligible for push."
        )
    return entity


def execute(
    config: RunConfig,
    app_config: AppConfig,
    session_factory: Optional[Callable[[], Session]] = None,
    client: Optional[FeedClient] = None,
) -> RunResult:
    """Build one feed (whole store, single entity or empty purge) and push it."""
    if client is None:
        client = FeedClient(
            app_config.push,
            app_config.site_url,
            data_source=app_config.datasource,
            raise_for_status=app_config.raise_on_http_error,
        )

    if config.mode == MODE_PURGE:
        # An empty full feed removes every document of the data source.
        client.feed_type = FEED_TYPE_FULL
        entities: List[ContentEntity] = []
        logger.info("Purging data source '%s'", client.data_source)
    elif config.mode == MODE_PUSH:
        client.feed_type = config.feed_type
        entities = _load_entities(app_config, session_factory)
    elif config.mode == MODE_ENTITY:
        client.feed_type = config.feed_type
        entities = [_load_entity(config.entity_id, app_config, session_factory)]
    else:
        raise ValueError(f"Unknown run mode '{config.mode}'")

    feed = client.create_feed(entities, config.action)

    if config.output_path:
        _save_feed_to_file(config.output_path, feed)

    pushed = False
    if config.dry_run:
        logger.info("Dry run: not pushing feed with %d records", len(entities))
    else:
        logger.info(
            "Pushing %s feed with %d records to %s",
            client.feed_type,
            len(entities),
            app_config.push.endpoint,
        )
        client.push(feed)
        pushed = True

    return RunResult(output_text=feed, record_count=len(entities), pushed=pushed)
