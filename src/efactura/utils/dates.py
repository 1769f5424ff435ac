"""Date formatting for the ``YYYY-MM-DD`` values expected by ANAF."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from ..errors import ValidationError


def format_date(value: str | int | float | date | datetime) -> str:
    """Return ``value`` formatted as ``YYYY-MM-DD``.

    Accepts :class:`~datetime.date` / :class:`~datetime.datetime` objects,
    ISO 8601 strings (a trailing ``Z`` is allowed) and epoch timestamps in
    milliseconds. Datetimes carrying a timezone are converted to UTC first.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        try:
            moment = datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValidationError("Invalid date provided") from exc
        return moment.date().isoformat()
    if isinstance(value, str):
        return _format_iso_string(value.strip())
    raise ValidationError("Invalid date provided")


def _format_iso_string(text: str) -> str:
    if not text:
        raise ValidationError("Invalid date provided")
    if len(text) == 10:
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError as exc:
            raise ValidationError("Invalid date provided") from exc

    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError("Invalid date provided") from exc
    return format_date(parsed)


__all__ = ["format_date"]
