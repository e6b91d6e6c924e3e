"""
Shared model helpers: identifiers, timestamps, clamping and partial merges
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def clamp_percent(value: float) -> float:
    """Clamp a 0-100 score into range"""
    return max(0.0, min(100.0, float(value)))


def unique(values) -> list:
    """Drop duplicates while keeping first-seen order"""
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def merge_fields(entity: M, fields: Mapping[str, Any]) -> M:
    """
    Merge a partial update into a model and re-validate it

    Nested mappings are merged one level deep, so ``{"metadata": {"mastery": 40}}``
    keeps the other metadata values. The ``id`` field is never changed.

    Args:
        entity: Current model instance
        fields: Partial field values keyed by field name

    Returns:
        New validated instance of the same model

    Raises:
        KeyError: If a field name is not part of the model
        pydantic.ValidationError: If the merged data is invalid
    """
    model_fields = type(entity).model_fields
    data: Dict[str, Any] = entity.model_dump()

    for key, value in fields.items():
        if key == "id":
            continue
        if key not in model_fields:
            raise KeyError(f"Unknown field '{key}' for {type(entity).__name__}")
        if isinstance(value, BaseModel):
            value = value.model_dump()
        current = data.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            value = {**current, **value}
        data[key] = value

    return type(entity).model_validate(data)
