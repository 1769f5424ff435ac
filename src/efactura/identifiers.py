"""Romanian tax identifier checks (CNP / CIF) and country resolution.

* CNP - "cod numeric personal", the 13 digit personal numeric code.
* CIF/CUI - the company fiscal code, 1 to 10 digits, optionally prefixed
  with ``RO`` for VAT registered companies.

Both carry a check digit. Checks never raise; only
:func:`normalize_tax_identifier` rejects empty input.
"""

from __future__ import annotations

from .address import resolve_country_name
from .countries import find_by_alpha2
from .errors import ValidationError

_CNP_CONTROL_KEY = "279146358279"
_CNP_EMPTY = "0" * 13
_CIF_CONTROL_KEY = "753217532"
_CIF_MAX_LENGTH = 10


def _is_ascii_digits(value: str) -> bool:
    return value.isascii() and value.isdigit()


def strip_tax_prefix(value: str) -> str:
    """Remove a leading ``RO`` (any casing) from ``value``."""

    text = value.strip()
    if text[:2].upper() == "RO":
        return text[2:]
    return text


def is_valid_personal_code(code: str | None) -> bool:
    """Return ``True`` when ``code`` is a valid CNP.

    ANAF accepts thirteen zeros as a placeholder for "no CNP", so that value
    is valid even though its first digit is 0.
    """

    if not isinstance(code, str) or len(code) != 13 or not _is_ascii_digits(code):
        return False
    if code == _CNP_EMPTY:
        return True

    total = sum(int(digit) * int(key) for digit, key in zip(code, _CNP_CONTROL_KEY))
    remainder = total % 11
    control = 1 if remainder == 10 else remainder
    if int(code[12]) != control:
        return False

    return code[0] != "0"


def is_valid_company_code(code: str | None) -> bool:
    """Return ``True`` when ``code`` is a valid CIF, with or without ``RO``."""

    if not isinstance(code, str):
        return False
    digits = strip_tax_prefix(code)
    if not digits or not _is_ascii_digits(digits) or len(digits) > _CIF_MAX_LENGTH:
        return False

    control = int(digits[-1])
    body = digits[:-1].rjust(9, "0")
    total = sum(int(digit) * int(key) for digit, key in zip(body, _CIF_CONTROL_KEY))
    expected = (total * 10) % 11
    if expected == 10:
        expected = 0
    return expected == control


def normalize_tax_identifier(value: str | None, *, strict: bool = False) -> str:
    """Return the canonical form of a tax identifier.

    A valid CNP is returned unchanged and a valid CIF gets the ``RO`` prefix.
    Anything else is returned as received, unless ``strict`` is set, in which
    case a :class:`~efactura.errors.ValidationError` is raised.
    """

    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Company VAT number is missing.")

    if is_valid_personal_code(value):
        return value
    if is_valid_company_code(value):
        return f"RO{strip_tax_prefix(value)}"
    if strict:
        raise ValidationError(f"Unrecognized tax identifier: {value}")
    return value


def resolve_country_from_identifier(identifier: str | None) -> str | None:
    """Return the country name encoded in the first two characters of ``identifier``."""

    if not isinstance(identifier, str):
        return None
    country = find_by_alpha2(identifier.strip()[:2])
    return country.name if country is not None else None


def resolve_country_code(value: str | None) -> str | None:
    """Return the alpha-2 code for ``value`` (an alpha-2 code or a country name)."""

    return resolve_country_name(value)


__all__ = [
    "is_valid_company_code",
    "is_valid_personal_code",
    "normalize_tax_identifier",
    "resolve_country_code",
    "resolve_country_from_identifier",
    "strip_tax_prefix",
]
