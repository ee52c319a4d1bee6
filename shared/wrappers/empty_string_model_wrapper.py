from datetime import date, datetime, timezone
import re
from pydantic import BaseModel, model_validator
from typing import Any, Union, get_args, get_origin

INVISIBLE_CHARS_PATTERN = re.compile(
    r"[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]")


def deep_clean(value: Any):
    """Recursively convert empty strings to None and strip invisible chars."""

    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    return value


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _annotation_kinds(annotation) -> set:
    origin = get_origin(annotation)
    args = get_args(annotation) if origin is Union else (annotation,)
    return {a for a in args if a in (date, datetime)}


def _is_free_form(annotation) -> bool:
    origin = get_origin(annotation)
    args = get_args(annotation) if origin is Union else (annotation,)
    return any(a is dict or get_origin(a) is dict for a in args)


class EmptyStringModel(BaseModel):
    """
    Base for request models coming from forms: blank strings become None
    (so an explicitly emptied field is nulled on update) and datetimes are
    normalised to naive UTC.
    """
    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if isinstance(values, dict):
            # Free-form JSON fields are stored as sent
            fields = cls.model_fields
            return {
                key: value if key in fields and _is_free_form(fields[key].annotation) else deep_clean(value)
                for key, value in values.items()
            }
        return values

    @model_validator(mode="after")
    def normalize_datetimes(self):
        for field_name, field in type(self).model_fields.items():
            if datetime not in _annotation_kinds(field.annotation):
                continue
            value = getattr(self, field_name)
            if isinstance(value, datetime) and value.tzinfo is not None:
                object.__setattr__(self, field_name, to_naive_utc(value))
        return self
