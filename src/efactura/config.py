"""Runtime settings for invoice assembly.

Settings are read from a JSON file whose path comes from the caller or from
the ``EFACTURA_SETTINGS_PATH`` environment variable. Without a file the
built-in defaults from :mod:`efactura.constants` apply.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_COUNTRY,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_CURRENCY,
    DEFAULT_UNIT_CODE,
    PAYMENT_MEANS_CODE,
    UBL_CUSTOMIZATION_ID,
    VAT_EXEMPTION_REASON_CODE,
)

_SETTINGS_ENV_VAR = "EFACTURA_SETTINGS_PATH"


class SettingsError(RuntimeError):
    """Raised when the settings file cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    """Values the assembler fills in when the invoice does not carry them.

    ``default_country`` is the domestic country: only its addresses get
    county and sector codes. ``default_country_code`` is emitted for parties
    whose country cannot be resolved at all.
    """

    currency: str = DEFAULT_CURRENCY
    unit_code: str = DEFAULT_UNIT_CODE
    customization_id: str = UBL_CUSTOMIZATION_ID
    default_country: str = DEFAULT_COUNTRY
    default_country_code: str = DEFAULT_COUNTRY_CODE
    exemption_reason_code: str = VAT_EXEMPTION_REASON_CODE
    payment_means_code: str = PAYMENT_MEANS_CODE
    strict_identifiers: bool = False


DEFAULT_SETTINGS = Settings()

_STRING_FIELDS = frozenset(
    item.name for item in fields(Settings) if item.name != "strict_identifiers"
)


def _resolve_settings_path(path: Path | None) -> Path | None:
    if path is not None:
        return path
    candidate = os.getenv(_SETTINGS_ENV_VAR)
    if candidate:
        return Path(candidate)
    return None


def _coerce(payload: dict[str, Any], source: Path) -> dict[str, Any]:
    unknown = sorted(set(payload) - {item.name for item in fields(Settings)})
    if unknown:
        msg = f"Settings file '{source}' has unknown keys: {', '.join(unknown)}"
        raise SettingsError(msg)

    values: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _STRING_FIELDS:
            if not isinstance(value, str) or not value.strip():
                msg = f"Settings file '{source}': '{key}' must be a non-empty string"
                raise SettingsError(msg)
            values[key] = value.strip()
        elif not isinstance(value, bool):
            msg = f"Settings file '{source}': '{key}' must be true or false"
            raise SettingsError(msg)
        else:
            values[key] = value
    return values


def load_settings(path: Path | None = None) -> Settings:
    """Return the settings stored at ``path`` merged over the defaults."""

    settings_path = _resolve_settings_path(path)
    if settings_path is None:
        return DEFAULT_SETTINGS

    if not settings_path.exists():
        msg = f"Settings file '{settings_path}' not found"
        raise SettingsError(msg)

    with settings_path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            msg = f"Settings file '{settings_path}' is not valid JSON"
            raise SettingsError(msg) from exc

    if not isinstance(payload, dict):
        msg = f"Settings file '{settings_path}' must contain a JSON object"
        raise SettingsError(msg)

    return replace(DEFAULT_SETTINGS, **_coerce(payload, settings_path))


__all__ = ["DEFAULT_SETTINGS", "Settings", "SettingsError", "load_settings"]
