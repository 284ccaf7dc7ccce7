"""Stop name normalization shared by resolution, matching and display."""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def normalize_stop_name(value: str | None) -> str:
    """Normalize a stop name for comparison.

    Applies NFC, removes all whitespace (including ideographic spaces) and casefolds.
    """
    text = unicodedata.normalize("NFC", str(value or ""))
    return _WHITESPACE.sub("", text).casefold()


def collapse_whitespace(value: str | None) -> str:
    """Trim and collapse runs of whitespace to a single space."""
    return _WHITESPACE.sub(" ", str(value or "")).strip()


def note_stop_name(note: str | None) -> str:
    """Stop name part of an upstream note ("Toyosu:for Shinonome" -> "Toyosu")."""
    return str(note or "").split(":")[0]


def note_matches_names(note: str, names: list[str]) -> bool:
    """Check whether a note names one of the given stops."""
    normalized_note = normalize_stop_name(note)
    return any(normalized_note == normalize_stop_name(name) for name in names)
