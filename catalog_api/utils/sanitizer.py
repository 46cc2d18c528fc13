import re

_TAG_RE = re.compile(r"<[^>]*>")
_UNSAFE_CHARS_RE = re.compile(r"[<>'\"&]")
_PRICE_CHARS_RE = re.compile(r"[^0-9.]")
PRICE_RE = re.compile(r"^\d+(\.\d{1,2})?$")


def clean_string(value: str | None) -> str:
    """Strip HTML tags and markup-significant characters from user text.

    Args:
        value: Raw text (may be None).

    Returns:
        str: Trimmed text without tags or ``< > ' " &``.
    """
    if not value:
        return ""
    text = _TAG_RE.sub("", str(value)).strip()
    return _UNSAFE_CHARS_RE.sub("", text)


def clean_price(value: object) -> float:
    """Keep only digits and the decimal point, then parse as float.

    Returns 0.0 when nothing parseable remains (e.g. ``"abc"`` or ``"1.2.3"``).
    """
    if value is None:
        return 0.0
    digits = _PRICE_CHARS_RE.sub("", str(value))
    try:
        return float(digits)
    except ValueError:
        return 0.0


def is_valid_price(value: object) -> bool:
    """True for non-negative prices with at most two decimals."""
    return bool(PRICE_RE.match(str(value)))
