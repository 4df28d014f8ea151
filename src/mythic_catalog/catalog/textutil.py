"""
Number and text helpers shared by the extractors and the skill parser.

MythicMobs values are loosely typed: a health value can be an int, a float,
a numeric string or a "min-max" range. Everything here is best-effort and
falls back to a caller supplied default instead of raising.
"""

import re
from typing import Any, List, Optional, cast

# Minecraft formatting codes: &c, §l, &r ...
COLOR_CODE_PATTERN = re.compile(r"[&§][0-9a-fk-or]", re.IGNORECASE)

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_RANGE_PATTERN = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)\s*-\s*([+-]?\d+(?:\.\d+)?)\s*$")


def strip_color_codes(text: Any) -> str:
    """Remove `&x` / `§x` colour codes and surrounding whitespace."""
    if text is None:
        return ""
    return COLOR_CODE_PATTERN.sub("", str(text)).strip()


def parse_float(value: Any) -> Optional[float]:
    """Parse a plain number, returning None when the value is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _NUMBER_PATTERN.match(value.strip()):
        return float(value.strip())
    return None


def parse_number(value: Any, default: Optional[float]) -> Optional[float]:
    """Parse a numeric attribute, reducing "min-max" ranges to their midpoint.

    Args:
        value: Raw attribute value (number, numeric string or range string)
        default: Value returned when nothing numeric can be extracted

    Returns:
        The parsed number, the midpoint of a range, or the default
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return default

    range_match = _RANGE_PATTERN.match(value)
    if range_match:
        low = float(range_match.group(1))
        high = float(range_match.group(2))
        return (low + high) / 2

    number = parse_float(value)
    return default if number is None else number


def parse_int(value: Any, default: int) -> int:
    """Parse an integer attribute using the same range policy as parse_number."""
    number = parse_number(value, None)
    if number is None:
        return default
    return int(number)


def as_bool(value: Any, default: Optional[bool] = None) -> Optional[bool]:
    """Interpret YAML booleans and their common string spellings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
    return default


def as_str_list(value: Any) -> List[str]:
    """Return a list of strings for list-typed attributes.

    A scalar is wrapped into a one-element list; None yields an empty list.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in cast(List[Any], value) if item is not None]
    return [str(value)]


def optional_str(value: Any) -> Optional[str]:
    """Stringify a scalar attribute, keeping None as None."""
    if value is None:
        return None
    return str(value)


def contains_keyword(keyword: str, *fields: Optional[str]) -> bool:
    """Case-insensitive substring match across several fields."""
    lowered = keyword.lower()
    return any(field is not None and lowered in field.lower() for field in fields)
