"""Storage row for one entity of the local backend."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Index, String

from jobboard.database import Base
from jobboard.database_types import JSONDocument, UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_entity_id() -> str:
    return uuid.uuid4().hex


class EntityRecord(Base):
    __tablename__ = "entity_records"

    id = Column(String(64), primary_key=True, default=new_entity_id)
    collection = Column(String(64), nullable=False)

    # Full document as the backend returns it, "_id" included
    document = Column(JSONDocument, nullable=False, default=dict)

    created_at = Column(UTCDateTime, default=_utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_entity_records_collection_created", "collection", "created_at"),
    )
