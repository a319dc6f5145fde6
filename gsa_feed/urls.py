"""Derive record URLs and timestamps from content entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union
from urllib.parse import quote, urljoin, urlsplit

from .models import ContentEntity, NEWS_LINK_BUNDLE

LAST_MODIFIED_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# URI schemes that point back into the site and need the current host.
_INTERNAL_SCHEMES = ("internal", "entity", "base")
# Characters left as is when encoding site paths; "%" keeps existing escapes.
_PATH_SAFE = "/:@!$&'()*+,;=%?#"


class EntityResolutionError(ValueError):
    """Raised when an entity has no usable route or link."""


def _absolute(http_host: str, path: str) -> str:
    return http_host.rstrip("/") + "/" + quote(path.lstrip("/"), safe=_PATH_SAFE)


def internal_url(entity: ContentEntity, http_host: str) -> str:
    """Return the host-prefixed internal path of the entity."""
    if not entity.internal_path:
        raise EntityResolutionError(
            f"Entity {entity.entity_type}:{entity.id} has no internal path."
        )
    return _absolute(http_host, entity.internal_path)


def resolve_link_uri(uri: str, http_host: str) -> str:
    """Turn a stored link field value into an absolute URL."""
    parts = urlsplit(uri)
    if not parts.scheme:
        return _absolute(http_host, uri)

    if parts.scheme in _INTERNAL_SCHEMES:
        path = uri.split(":", 1)[1]
        return _absolute(http_host, path)

    if parts.scheme == "route":
        raise EntityResolutionError(f"Cannot resolve route URI '{uri}' outside the site.")

    # External target, returned as is.
    return uri


def display_url(entity: ContentEntity, http_host: str) -> str:
    """Return the canonical (SEO) URL shown for the entity in search results."""
    if entity.bundle == NEWS_LINK_BUNDLE:
        if not entity.link_uri:
            raise EntityResolutionError(
                f"News link {entity.id} has no link URL."
            )
        return resolve_link_uri(entity.link_uri, http_host)

    if not entity.canonical_url:
        raise EntityResolutionError(
            f"Entity {entity.entity_type}:{entity.id} has no canonical route."
        )
    parts = urlsplit(entity.canonical_url)
    if parts.netloc:
        # Already absolute, or protocol-relative.
        return urljoin(http_host, entity.canonical_url)
    return _absolute(http_host, entity.canonical_url)


def format_last_modified(changed: Union[datetime, int, float]) -> str:
    """Format the entity changed time as an ISO-8601 UTC instant."""
    if isinstance(changed, datetime):
        if changed.tzinfo is None:
            changed = changed.replace(tzinfo=timezone.utc)
        value = changed.astimezone(timezone.utc)
    else:
        value = datetime.fromtimestamp(changed, tz=timezone.utc)
    return value.strftime(LAST_MODIFIED_FORMAT)
