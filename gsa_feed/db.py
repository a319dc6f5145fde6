"""Content store read by the bulk and single-entity push paths."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import Column, DateTime, Integer, String, create_engine, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .models import ContentEntity, ENTITY_TYPE_NODE

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class ContentModel(Base):
    """A content entity as known to the CMS."""

    __tablename__ = "content"

    id = Column(Integer, primary_key=True)
    entity_type = Column(String, nullable=False, default=ENTITY_TYPE_NODE)
    bundle = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    internal_path = Column(String, nullable=True)
    canonical_url = Column(String, nullable=True)
    link_uri = Column(String, nullable=True)
    changed = Column(DateTime(timezone=True), nullable=False)


def masked_url(connection_string: str) -> str:
    """Render a connection string with its password hidden."""
    return make_url(connection_string).render_as_string(hide_password=True)


def init_engine(connection_string: Optional[str]) -> Optional[Engine]:
    """Initialize the database engine."""
    if not connection_string:
        return None

    logger.info("Initializing database connection: %s", masked_url(connection_string))
    engine = create_engine(connection_string)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory for the given engine."""
    return sessionmaker(bind=engine)


def _to_entity(row: ContentModel) -> ContentEntity:
    changed = row.changed
    # SQLite drops tzinfo on the way back.
    if changed is not None and changed.tzinfo is None:
        changed = changed.replace(tzinfo=timezone.utc)
    return ContentEntity(
        id=row.id,
        entity_type=row.entity_type,
        bundle=row.bundle,
        title=row.title or "",
        internal_path=row.internal_path,
        canonical_url=row.canonical_url,
        link_uri=row.link_uri,
        changed=changed,
    )


def get_content(session: Session, entity_id: int) -> Optional[ContentEntity]:
    """Retrieve a single entity by id."""
    row = session.get(ContentModel, entity_id)
    if not row:
        return None
    return _to_entity(row)


def load_content_by_bundles(
    session: Session, bundles: Sequence[str]
) -> List[ContentEntity]:
    """Load every node entity whose bundle is in ``bundles``."""
    if not bundles:
        return []

    stmt = (
        select(ContentModel)
        .where(
            ContentModel.entity_type == ENTITY_TYPE_NODE,
            ContentModel.bundle.in_(list(bundles)),
        )
        .order_by(ContentModel.id)
    )
    rows = session.execute(stmt).scalars().all()
    logger.info("Loaded %d entities for bundles %s", len(rows), ", ".join(bundles))
    return [_to_entity(row) for row in rows]


def upsert_content(session: Session, entity: ContentEntity) -> None:
    """Insert or update an entity in the store."""
    changed = entity.changed
    if not isinstance(changed, datetime):
        changed = datetime.fromtimestamp(changed, tz=timezone.utc)
    elif changed.tzinfo is not None:
        changed = changed.astimezone(timezone.utc)

    existing = session.get(ContentModel, entity.id)
    if existing:
        existing.entity_type = entity.entity_type
        existing.bundle = entity.bundle
        existing.title = entity.title
        existing.internal_path = entity.internal_path
        existing.canonical_url = entity.canonical_url
        existing.link_uri = entity.link_uri
        existing.changed = changed
    else:
        session.add(
            ContentModel(
                id=entity.id,
                entity_type=entity.entity_type,
                bundle=entity.bundle,
                title=entity.title,
                internal_path=entity.internal_path,
                canonical_url=entity.canonical_url,
                link_uri=entity.link_uri,
                changed=changed,
            )
        )

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
