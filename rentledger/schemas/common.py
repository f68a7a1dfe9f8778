"""Shared schema configuration."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from rentledger.core.money import parse_brl


class CamelModel(BaseModel):
    """Base schema exposing camelCase JSON while accepting snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def parse_user_amount(value: object) -> object:
    """Read typed amounts such as ``"R$ 1.234,56"`` as cents; other values pass through."""
    if isinstance(value, str) and value.strip():
        return parse_brl(value)
    return value


__all__ = ["CamelModel", "parse_user_amount"]
