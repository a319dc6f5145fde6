"""Build GSA content feed XML documents."""

from __future__ import annotations

import logging
from typing import Iterable, List
from xml.etree import ElementTree as ET

from .models import (
    ContentEntity,
    FEED_ACTION_ADD,
    FEED_ACTION_DELETE,
    FEED_PUBLIC_ID,
    FEED_ROOT_ELEMENT,
    FeedEnvelope,
    FeedRecord,
)
from .urls import display_url, format_last_modified, internal_url

logger = logging.getLogger(__name__)


def record_from_entity(
    entity: ContentEntity, http_host: str, action: str = FEED_ACTION_ADD
) -> FeedRecord:
    """Resolve the record fields for a single entity."""
    return FeedRecord(
        url=internal_url(entity, http_host),
        displayurl=display_url(entity, http_host),
        last_modified=format_last_modified(entity.changed),
        action=action,
    )


def records_from_entities(
    entities: Iterable[ContentEntity], http_host: str, action: str = FEED_ACTION_ADD
) -> List[FeedRecord]:
    return [record_from_entity(entity, http_host, action) for entity in entities]


def _record_attributes(record: FeedRecord) -> dict:
    attributes = {
        "url": record.url,
        "displayurl": record.displayurl,
        "mimetype": record.mimetype,
        # Only honoured for web and metadata-and-url feeds.
        "crawl-immediately": "true" if record.crawl_immediately else "false",
        "authmethod": record.authmethod,
        "last-modified": record.last_modified,
    }
    # "add" is the default action on the appliance side.
    if record.action == FEED_ACTION_DELETE:
        attributes["action"] = record.action
    return attributes


def build_feed(envelope: FeedEnvelope, system_id: str) -> str:
    """Serialise the envelope to a UTF-8 gsafeed document with a doctype."""
    root = ET.Element(FEED_ROOT_ELEMENT)

    header = ET.SubElement(root, "header")
    ET.SubElement(header, "datasource").text = envelope.datasource
    ET.SubElement(header, "feedtype").text = envelope.feedtype

    group = ET.SubElement(root, "group")
    for record in envelope.records:
        ET.SubElement(group, "record", _record_attributes(record))

    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")

    logger.debug(
        "Built %s feed for data source '%s' with %d records",
        envelope.feedtype,
        envelope.datasource,
        len(envelope.records),
    )
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f'<!DOCTYPE {FEED_ROOT_ELEMENT} PUBLIC "{FEED_PUBLIC_ID}" "{system_id}">\n'
        f"{body}\n"
    )
