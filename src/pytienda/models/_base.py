"""Base model for storefront API payloads.

Every catalog model inherits from :class:`TiendaBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  string values so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def parse_money(value: Any) -> Any:
    """Coerce API prices (numbers or serialized decimals) to :class:`Decimal`.

    Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``.
    Unparseable values are passed through for pydantic to reject.
    """
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return value
    return value


Money = Annotated[Decimal, BeforeValidator(parse_money)]
"""Annotated type that coerces API prices to :class:`Decimal`."""


class TiendaBaseModel(BaseModel):
    """Base for storefront API models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * ``None`` / blank strings → dropped so the field default is used
    * Stashes the original API dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)

        cleaned: dict[str, Any] = {}
        for key, value in original.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value

        # Keep an explicit raw= (kwargs construction); otherwise stash the payload.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe camelCase dict, suitable for persistence."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
