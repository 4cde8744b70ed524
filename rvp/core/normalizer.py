"""
Normalization of matched text into typed values.

Handles:
- Currency and percent adornments ($1,000 / 12.5% / "42")
- Grouping separators (100_000.5 / 2,519.25)
- Magnitude suffixes (2.5k / 1.5M / 2,519.25B)

Anything that does not parse as a number is kept as text.
"""

import re
from decimal import Decimal, localcontext
from typing import Optional

from .models import ExtractedValue, Number, Text

CURRENCY_SYMBOLS = frozenset("$€£¥₽₹¢₩₺₴₿")
QUOTE_CHARS = frozenset("\"'“”‘’«»„")

MAGNITUDE_SUFFIXES = {
    "k": Decimal(1_000),
    "m": Decimal(1_000_000),
    "b": Decimal(1_000_000_000),
}

# Digits of headroom over the input length for suffix multiplication
_EXTRA_PRECISION = 10

# Unsigned decimal: 12, 12.5, 12., .5
_DECIMAL_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)")

# A grouping separator sits between two digits
_SEPARATOR_RE = re.compile(r"(?<=\d)[,_](?=\d)")


def strip_adornments(text: str) -> str:
    """
    Remove quotes, a leading currency symbol and a trailing percent sign.

    A minus sign may appear before or after the currency symbol
    ("-$5" and "$-5" both become "-5").

    Args:
        text: Trimmed text

    Returns:
        Candidate string for numeric parsing
    """
    candidate = text
    if len(candidate) >= 2 and candidate[0] in QUOTE_CHARS and candidate[-1] in QUOTE_CHARS:
        candidate = candidate[1:-1].strip()

    sign = ""
    if candidate.startswith("-"):
        sign, candidate = "-", candidate[1:]

    if candidate[:1] in CURRENCY_SYMBOLS:
        candidate = candidate[1:].lstrip()
        if not sign and candidate.startswith("-"):
            sign, candidate = "-", candidate[1:]

    if candidate.endswith("%"):
        candidate = candidate[:-1].rstrip()

    return sign + candidate


def remove_grouping(text: str) -> Optional[str]:
    """
    Remove digit-group separators from an unsigned numeric candidate.

    A comma or underscore is a separator when it sits between two digits,
    on either side of the decimal point. A token may use commas or
    underscores but not both.

    Args:
        text: Unsigned numeric candidate (no suffix)

    Returns:
        Text without separators, or None if a comma or underscore is not
        a valid grouping separator
    """
    if "," in text and "_" in text:
        return None

    stripped = _SEPARATOR_RE.sub("", text)
    if "," in stripped or "_" in stripped:
        return None

    return stripped


def normalize(raw_text: str) -> ExtractedValue:
    """
    Normalize raw matched text into a Text or Number value.

    Never raises: text that is not numeric is returned as Text with
    surrounding whitespace trimmed. Numbers are exact; no digits are lost
    to rounding however long the input is.

    Examples:
    - "  Example Domain " -> Text("Example Domain")
    - "100_000.5" -> Number(100000.5)
    - "2.5k" -> Number(2500)
    - "2,519.25B" -> Number(2519250000000)
    - "$-1.5M" -> Number(-1500000)

    Args:
        raw_text: Text content of the matched element

    Returns:
        ExtractedValue
    """
    text = (raw_text or "").strip()
    if not text:
        return Text(text)

    candidate = strip_adornments(text)

    negative = candidate.startswith("-")
    body = candidate[1:] if negative else candidate

    multiplier = Decimal(1)
    if body and body[-1].lower() in MAGNITUDE_SUFFIXES:
        multiplier = MAGNITUDE_SUFFIXES[body[-1].lower()]
        body = body[:-1].rstrip()

    body = remove_grouping(body)
    if body is None or not _DECIMAL_RE.fullmatch(body):
        return Text(text)

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(body) + _EXTRA_PRECISION)
        value = Decimal(body) * multiplier
        if negative:
            value = -value

    return Number(value=value, original_text=text)
