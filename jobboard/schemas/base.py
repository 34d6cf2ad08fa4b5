"""Shared configuration and decoding helpers for entity schemas."""
import logging
from typing import Any, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from jobboard.exceptions import EntityDecodeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class EntityModel(BaseModel):
    """Base schema for payloads exchanged with the entity backend (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, **kwargs: Any) -> dict:
        """Dump using wire aliases and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


def decode_entity(model: Type[ModelT], payload: Any) -> ModelT:
    """
    Validate a single remote payload into a typed model.

    Raises:
        EntityDecodeError: If the payload does not match the schema
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise EntityDecodeError(model.__name__, e.errors(), payload) from e


def decode_entities(model: Type[ModelT], payloads: Iterable[Any]) -> List[ModelT]:
    """
    Validate a list response. Malformed rows are skipped with a warning so one
    bad document does not hide the rest of the collection.
    """
    decoded: List[ModelT] = []
    skipped = 0
    for payload in payloads:
        try:
            decoded.append(decode_entity(model, payload))
        except EntityDecodeError as e:
            skipped += 1
            entity_id = payload.get("_id") if isinstance(payload, dict) else None
            logger.warning(f"Skipped malformed {model.__name__} {entity_id}: {e.errors[:3]}")

    if skipped:
        logger.info(f"Decoded {len(decoded)} {model.__name__} rows ({skipped} skipped)")
    return decoded
