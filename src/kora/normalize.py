"""Comparison keys for diacritic- and case-insensitive matching."""

from __future__ import annotations

import unicodedata


def strip_marks(text: str) -> str:
    """Remove combining marks from ``text``, keeping its case.

    The text is decomposed (NFD), every character in a Unicode mark category
    is dropped and the remainder is recomposed (NFC). Applying it twice gives
    the same result as applying it once.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(
        ch for ch in decomposed if not unicodedata.category(ch).startswith("M")
    )
    return unicodedata.normalize("NFC", stripped)


def comparison_key(text: str) -> str:
    """Return the diacritic-stripped, lowercased form of ``text``.

    Examples:
        >>> comparison_key("Žiadosť")
        'ziadost'
        >>> comparison_key("MEDOVKA")
        'medovka'
    """
    return strip_marks(text).lower()
