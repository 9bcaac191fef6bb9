"""Redaction of customer data in debug logs.

Three kinds of fields get special treatment:

* credentials (passwords, tokens, cookies) are replaced outright;
* e-mail addresses keep their first character and domain;
* phone numbers keep their last four digits, postal addresses are dropped.

Key matching ignores case and underscores, so ``shipping_address`` and
``shippingAddress`` are the same field.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"

_CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwordhash",
        "token",
        "accesstoken",
        "refreshtoken",
        "sessiontoken",
        "authorization",
        "cookie",
    }
)


def _mask_email(value: str) -> str:
    local, sep, domain = value.partition("@")
    if not sep or not local:
        return REDACTED
    return f"{local[0]}***@{domain}"


def _mask_phone(value: str) -> str:
    digits = [ch for ch in value if ch.isdigit()]
    if len(digits) <= 4:
        return REDACTED
    return "***" + "".join(digits[-4:])


def _drop(value: str) -> str:
    return REDACTED


_CONTACT_MASKS: dict[str, Callable[[str], str]] = {
    "email": _mask_email,
    "phone": _mask_phone,
    "address": _drop,
    "shippingaddress": _drop,
    "billingaddress": _drop,
}


def _normalize_key(key: Any) -> str:
    return str(key).replace("_", "").lower()


def _redact_field(key: str, value: Any, max_string: int, depth: int) -> Any:
    if key in _CREDENTIAL_KEYS:
        return REDACTED
    mask = _CONTACT_MASKS.get(key)
    if mask is not None and isinstance(value, str):
        return mask(value)
    return redact_for_log(value, max_string=max_string, _depth=depth)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to put in a debug log.

    Pydantic models are dumped by alias first, so stored users and orders
    can be passed directly.
    """
    if _depth > 20:
        return "<max-depth>"

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(k): _redact_field(_normalize_key(k), v, max_string, _depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    return repr(value)
