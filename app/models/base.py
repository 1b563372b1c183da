"""Base pydantic model for records coming from the marketplace backend."""
from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Accepts backend camelCase keys, serialises with snake_case field names."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
        extra="ignore",
    )


def IdField(**kwargs: Any) -> Any:
    """Backend documents carry `_id`; already-normalised payloads carry `id`."""
    return Field(validation_alias=AliasChoices("_id", "id"), **kwargs)


def ref_id(value: Any) -> Any:
    """Return the id of a reference that may be populated (`{"_id": ...}`) or plain."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value
