"""Database models"""
from jobboard.models.entity_record import EntityRecord

__all__ = [
    "EntityRecord",
]
