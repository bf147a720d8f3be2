"""
Location Resolver — Text Repair
================================
Best-effort cleanup applied to every string the normalizer emits.

Providers (and the systems that proxy them) regularly hand back text that
went through one encode/decode cycle too many: UTF-8 bytes read as
Latin-1 (``"RincÃ³n"``), or JSON escapes that were never unescaped
(``"Rinc\\u00f3n"``).  :func:`clean_string` undoes both and never raises;
when the text is beyond repair it degrades to an ASCII-folded copy via
:func:`strip_diacritics`.
"""

from __future__ import annotations

import json
import unicodedata
from types import MappingProxyType

_REPLACEMENT_CHAR = "\ufffd"

# Double-encoding markers: the Latin-1 rendering of UTF-8 lead bytes 0xC3/0xC2.
_MOJIBAKE_MARKERS = ("Ã", "Â")

# Letters that NFKD leaves untouched because they carry no combining mark.
DIACRITIC_REPLACEMENTS = MappingProxyType(
    {
        "Ł": "L",
        "ł": "l",
        "Ð": "D",
        "đ": "d",
        "Đ": "D",
        "Ø": "O",
        "ø": "o",
        "œ": "oe",
        "Œ": "OE",
        "Æ": "AE",
        "æ": "ae",
        "ß": "ss",
        "Þ": "Th",
        "þ": "th",
    }
)


def _is_valid_utf8(value: str) -> bool:
    # Lone surrogates survive JSON unescaping but cannot be encoded.
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _unescape(value: str) -> str | None:
    """Decode ``\\uXXXX`` escapes as if *value* were a quoted JSON string."""
    try:
        decoded = json.loads(f'"{value}"', strict=False)
    except ValueError:
        return None
    return decoded if isinstance(decoded, str) else None


def _decode_latin1(value: str) -> str | None:
    """Reinterpret each code point as a byte and decode the bytes as UTF-8."""
    try:
        return value.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return None


def clean_string(value: str | None) -> str:
    """Trim *value* and repair common encoding damage.

    Steps, in order:

    1. Strip surrounding whitespace.
    2. Unescape ``\\u`` sequences when present.
    3. Undo UTF-8-read-as-Latin-1 mojibake when the ``Ã``/``Â`` markers
       are present and the reinterpretation yields valid UTF-8.
    4. If the result still cannot be encoded as UTF-8 or contains
       U+FFFD, fall back to :func:`strip_diacritics` of the trimmed input,
       even when that leaves nothing.

    Args:
        value: Any provider-supplied string (``None`` is treated as empty).

    Returns:
        The repaired string; ``""`` for empty input.  Never raises.

    Example::

        >>> clean_string("Rinc\\u00c3\\u00b3n de Romos")
        'Rincón de Romos'
    """
    if not value:
        return ""
    trimmed = value.strip()
    if not trimmed:
        return ""
    original = trimmed

    if "\\u" in trimmed:
        decoded = _unescape(trimmed)
        if decoded is not None:
            trimmed = decoded

    if any(marker in trimmed for marker in _MOJIBAKE_MARKERS):
        decoded = _decode_latin1(trimmed)
        if decoded:
            trimmed = decoded

    if not _is_valid_utf8(trimmed) or _REPLACEMENT_CHAR in trimmed:
        # May be empty when the input was nothing but artifacts.
        trimmed = strip_diacritics(original).strip()

    return trimmed


def replace_surrogates(value: str) -> str:
    """Replace lone surrogates with U+FFFD so *value* encodes as UTF-8.

    ``json.loads`` turns an unpaired ``\\udXXX`` escape into a surrogate
    code point, which cannot be written to a UTF-8 file or terminal.
    """
    if _is_valid_utf8(value):
        return value
    return "".join(
        _REPLACEMENT_CHAR if unicodedata.category(ch) == "Cs" else ch for ch in value
    )


def strip_diacritics(value: str) -> str:
    """Fold *value* to its base letters for search indexing.

    Decomposes with NFKD, drops non-spacing combining marks, substitutes
    :data:`DIACRITIC_REPLACEMENTS` for letters with no decomposition,
    discards unencodable surrogates and U+FFFD, then recomposes with NFC.
    The function is idempotent.

    Example::

        >>> strip_diacritics("Łódź")
        'Lodz'
    """
    decomposed = unicodedata.normalize("NFKD", value)
    out: list[str] = []
    for ch in decomposed:
        if unicodedata.category(ch) == "Mn":
            continue
        if ord(ch) < 128:
            out.append(ch)
            continue
        replacement = DIACRITIC_REPLACEMENTS.get(ch)
        if replacement is not None:
            out.append(replacement)
            continue
        if ch == _REPLACEMENT_CHAR or unicodedata.category(ch) == "Cs":
            continue
        out.append(ch)
    return unicodedata.normalize("NFC", "".join(out))
