"""
Custom SQLAlchemy types for cross-database compatibility.
"""
import json
from datetime import datetime, timezone

from sqlalchemy import DateTime, Text, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB as PostgreSQLJSONB


class JSONDocument(TypeDecorator):
    """
    Entity document column.

    Uses PostgreSQL's JSONB type when available, otherwise stores the
    document as a JSON string in a TEXT column.
    """
    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PostgreSQLJSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if dialect.name == 'postgresql':
            return value
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if dialect.name == 'postgresql' or isinstance(value, dict):
            return value
        return json.loads(value)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps.

    SQLite drops tzinfo on the way in, so values are normalized to UTC before
    binding and tagged as UTC again when read back.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
