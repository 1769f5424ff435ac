"""Normalisation of Romanian administrative names and country names.

CIUS-RO expects ISO 3166-2:RO codes in ``CountrySubentity`` (``RO-CJ``,
``RO-B``, ...) and, for Bucharest addresses, a ``SECTOR1`` .. ``SECTOR6`` code
in ``CityName``. Free-text input comes with or without diacritics, in any
casing and with administrative prefixes such as "Judetul", "Mun." or
"Sectorul", so every lookup goes through :func:`normalize_text` first.

None of the helpers raise: unmatched input yields ``None`` and the caller
decides whether to keep the original text.
"""

from __future__ import annotations

import re
import unicodedata
from types import MappingProxyType
from typing import Mapping

from .constants import BUCHAREST_SUBDIVISION, DEFAULT_COUNTRY
from .countries import COUNTRIES, find_by_alpha2

_ROMANIAN_LETTERS = str.maketrans(
    {
        "ș": "s",
        "ş": "s",
        "Ș": "s",
        "Ş": "s",
        "ț": "t",
        "ţ": "t",
        "Ț": "t",
        "Ţ": "t",
    }
)

_SEPARATORS = re.compile(r"[._,\-]+")
_WHITESPACE = re.compile(r"\s+")
_EXPANSIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bmun\b"), "municipiul"),
    (re.compile(r"\bjud(?:e?t(?:ul)?)?\b"), "judetul"),
    (re.compile(r"\bsect(?:or(?:ul)?)?\b"), "sectorul"),
    (re.compile(r"\bs(?=\s*\d)"), "sectorul"),
)
_ADMINISTRATIVE_WORDS = re.compile(
    r"\b(?:judetul|municipiul|comuna|oras(?:ul)?|sectorul)\b"
)
_SECTOR = re.compile(r"\b(?:sectorul|sector|s)\s*[:.\-]?\s*0?([1-6])\b")
_ALPHA2 = re.compile(r"^[A-Z]{2}$")

_COUNTY_CODES: Mapping[str, str] = MappingProxyType(
    {
        "bucuresti": BUCHAREST_SUBDIVISION,
        "buc": BUCHAREST_SUBDIVISION,
        "alba": "RO-AB",
        "arad": "RO-AR",
        "arges": "RO-AG",
        "bacau": "RO-BC",
        "bihor": "RO-BH",
        "bistrita nasaud": "RO-BN",
        "bistrita-nasaud": "RO-BN",
        "botosani": "RO-BT",
        "braila": "RO-BR",
        "brasov": "RO-BV",
        "buzau": "RO-BZ",
        "calarasi": "RO-CL",
        "caras severin": "RO-CS",
        "caras-severin": "RO-CS",
        "carasseverin": "RO-CS",
        "cluj": "RO-CJ",
        "constanta": "RO-CT",
        "covasna": "RO-CV",
        "dambovita": "RO-DB",
        "dimbovita": "RO-DB",
        "dolj": "RO-DJ",
        "galati": "RO-GL",
        "giurgiu": "RO-GR",
        "gorj": "RO-GJ",
        "harghita": "RO-HR",
        "hunedoara": "RO-HD",
        "ialomita": "RO-IL",
        "iasi": "RO-IS",
        "ilfov": "RO-IF",
        "maramures": "RO-MM",
        "mehedinti": "RO-MH",
        "mures": "RO-MS",
        "neamt": "RO-NT",
        "olt": "RO-OT",
        "prahova": "RO-PH",
        "salaj": "RO-SJ",
        "satu mare": "RO-SM",
        "satu-mare": "RO-SM",
        "sibiu": "RO-SB",
        "suceava": "RO-SV",
        "teleorman": "RO-TR",
        "timis": "RO-TM",
        "tulcea": "RO-TL",
        "valcea": "RO-VL",
        # "vâlcea" loses the circumflex and is often typed with an "i".
        "vilcea": "RO-VL",
        "vaslui": "RO-VS",
        "vrancea": "RO-VN",
    }
)


def normalize_text(text: str | None) -> str | None:
    """Return a lowercase, diacritic-free, abbreviation-expanded form of ``text``.

    ``None`` is returned for non-string or blank input.

    >>> normalize_text("Jud. Bistrița-Năsăud")
    'judetul bistrita nasaud'
    """

    if not isinstance(text, str):
        return None
    value = text.strip()
    if not value:
        return None

    value = value.lower().translate(_ROMANIAN_LETTERS)
    decomposed = unicodedata.normalize("NFD", value)
    value = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    value = _SEPARATORS.sub(" ", value)
    value = _WHITESPACE.sub(" ", value)
    for pattern, replacement in _EXPANSIONS:
        value = pattern.sub(replacement, value)
    return value.strip() or None


def _strip_administrative_words(normalized: str) -> str:
    stripped = _ADMINISTRATIVE_WORDS.sub("", normalized)
    return _WHITESPACE.sub(" ", stripped).strip()


def resolve_county(text: str | None) -> str | None:
    """Return the ISO 3166-2:RO code for a county (or Bucharest) name."""

    normalized = normalize_text(text)
    if not normalized:
        return None

    code = _COUNTY_CODES.get(normalized)
    if code:
        return code

    stripped = _strip_administrative_words(normalized)
    if stripped and stripped != normalized:
        return _COUNTY_CODES.get(stripped)
    return None


def resolve_bucharest_sector(text: str | None) -> str | None:
    """Return ``SECTOR{n}`` when ``text`` mentions a Bucharest sector 1-6."""

    normalized = normalize_text(text)
    if not normalized:
        return None

    match = _SECTOR.search(normalized)
    if match is None:
        return None
    return f"SECTOR{match.group(1)}"


def is_bucharest_subdivision(code: str | None) -> bool:
    """Return ``True`` if ``code`` is the Bucharest subdivision (``RO-B``)."""

    return isinstance(code, str) and code.strip().upper() == BUCHAREST_SUBDIVISION


def resolve_country_name(text: str | None) -> str | None:
    """Return the alpha-2 code for a country name or an alpha-2 code."""

    normalized = normalize_text(text)
    if not normalized:
        return None

    candidate = text.strip().upper()  # type: ignore[union-attr]
    if _ALPHA2.match(candidate):
        country = find_by_alpha2(candidate)
        if country is not None:
            return country.alpha2

    for country in COUNTRIES:
        if normalize_text(country.name) == normalized:
            return country.alpha2
    return None


def is_domestic_invoice(country_name: str | None, domestic: str = DEFAULT_COUNTRY) -> bool:
    """Return ``True`` if ``country_name`` designates the ``domestic`` country.

    Both sides may be a country name or an alpha-2 code.
    """

    code = resolve_country_name(country_name)
    return code is not None and code == resolve_country_name(domestic)


__all__ = [
    "is_bucharest_subdivision",
    "is_domestic_invoice",
    "normalize_text",
    "resolve_bucharest_sector",
    "resolve_country_name",
    "resolve_county",
]
