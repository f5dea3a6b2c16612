from __future__ import annotations

import re
import unicodedata
from typing import Tuple

MAX_SLUG_LENGTH = 100

_TRANSLITERATIONS: Tuple[Tuple[str, str], ...] = (
    ("ä", "ae"),
    ("ö", "oe"),
    ("ü", "ue"),
    ("ß", "ss"),
)

# Checked in order, first match wins.
PLURAL_EXCEPTIONS: Tuple[Tuple[str, str], ...] = (
    ("Company", "Companies"),
    ("Attorney", "Attorneys"),
    ("Agency", "Agencies"),
    ("Factory", "Factories"),
    ("Business", "Businesses"),
)

_QUOTES = re.compile(r"['\"‘’“”]")
_PARENTHESES = re.compile(r"\([^)]*\)")
_AFTER_COMMA = re.compile(r",.*$")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str | None) -> str:
    """Turn a display name into a lower-case, hyphen-separated URL segment.

    "St. Louis Park" -> "st-louis-park", "München" -> "muenchen",
    "Halle (Saale)" -> "halle", "D'Iberville" -> "diberville".
    Idempotent; punctuation-only input gives "".
    """
    if not name:
        return ""
    text = name.lower()
    for src, dst in _TRANSLITERATIONS:
        text = text.replace(src, dst)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.replace(".", "")
    text = _QUOTES.sub("", text)
    text = _PARENTHESES.sub("", text)
    text = _AFTER_COMMA.sub("", text)
    text = _NON_ALNUM.sub("-", text).strip("-")
    return text[:MAX_SLUG_LENGTH].strip("-")


def pluralize(name: str) -> str:
    for singular, plural in PLURAL_EXCEPTIONS:
        if name.endswith(singular):
            return name[: len(name) - len(singular)] + plural
    return f"{name}s"


def format_category_name(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def format_location_name(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in slug.split("-"))
