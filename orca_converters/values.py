"""
Scalar value helpers shared by the setting transforms.

SuperSlicer and PrusaSlicer store every setting as text, and many lengths or
speeds may be written either as an absolute number or as a percentage of
another setting. OrcaSlicer wants absolute values in most of those places, so
these helpers classify values and convert between the two forms. Results are
returned as strings because that is how OrcaSlicer stores them in JSON.
"""
import re
from typing import Any, List, Optional

DECIMAL_PATTERN = re.compile(r'^[+-]?\d+(\.\d+)?$')
PERCENT_PATTERN = re.compile(r'^[+-]?\d+(\.\d+)?%$')
LEADING_NUMBER_PATTERN = re.compile(r'^\s*([+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?)')

# OrcaSlicer rejects flow ratios above this
MAX_RATIO = 2

_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'f': '\f',
    'b': '\b',
    'a': '\a',
    'e': '\x1b',
    '0': '\0',
}


def is_decimal(value: Any) -> bool:
    """Check whether a value is a plain decimal number such as "12" or "-0.5"."""
    return value is not None and bool(DECIMAL_PATTERN.match(str(value)))


def is_percent(value: Any) -> bool:
    """Check whether a value is a percentage such as "50%"."""
    return value is not None and bool(PERCENT_PATTERN.match(str(value)))


def remove_percent(value: str) -> str:
    if value is None:
        return value
    return re.sub(r'%$', '', value)


def format_number(number: float) -> str:
    """Format a number the shortest way: 5.0 -> "5", 0.35 -> "0.35"."""
    text = '%.15g' % number
    if text == '-0':
        return '0'
    return text


def to_number(value: Any) -> float:
    """
    Read the leading number of a value, 0 when there is none.

    Source files occasionally carry units or trailing text ("0.2mm"), which
    the original applications read leniently as well.
    """
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0
    match = LEADING_NUMBER_PATTERN.match(str(value))
    return float(match.group(1)) if match else 0.0


def is_truthy(value: Any) -> bool:
    """INI booleans: "", "0" and missing values are false, everything else is true."""
    return value not in (None, '', '0', 0, False)


def percent_to_mm(reference: Any, value: Any) -> Optional[str]:
    """
    Resolve a percentage against a reference length or speed.

    Returns the value unchanged if it is not a percentage, or None if the
    reference cannot be used (missing, non-numeric or itself a percentage).
    """
    if not is_percent(value):
        return value
    if reference is None or is_percent(reference):
        return None
    if not isinstance(reference, (int, float)) and not is_decimal(reference):
        return None
    return format_number(float(reference) * (float(remove_percent(value)) / 100))


def mm_to_percent(reference: Any, value: Any) -> Optional[str]:
    """Express an absolute value as a percentage of a reference."""
    if is_percent(value):
        return value
    if reference is None or is_percent(reference):
        return None
    if not isinstance(reference, (int, float)) and not is_decimal(reference):
        return None
    if float(reference) == 0:
        return None
    return format_number((to_number(value) / float(reference)) * 100) + '%'


def percent_to_ratio(value: Any) -> Any:
    """Turn "95%" into "0.95", capped at 2. Non-percentages are returned unchanged."""
    if not is_percent(value):
        return value
    ratio = float(remove_percent(value)) / 100
    if ratio > MAX_RATIO:
        return format_number(MAX_RATIO)
    return format_number(ratio)


def format_speed(value: Any) -> Any:
    """Limit a decimal speed to one decimal place and drop a trailing ".0"."""
    if not is_decimal(value):
        return value
    text = '%.1f' % float(value)
    if text.endswith('.0'):
        text = text[:-2]
    if text == '-0':
        text = '0'
    return text


def multivalue_to_array(value: str) -> List[str]:
    """Split a per-extruder value: comma separated if it has commas, else semicolons."""
    delimiter = ',' if ',' in value else ';'
    return [item.strip() for item in value.split(delimiter)]


def unquote(value: str) -> str:
    """Strip one pair of surrounding double quotes."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def unescape_gcode(value: str) -> str:
    """Decode backslash escapes (\\n, \\t, \\", \\\\ ...) of a quoted INI string."""
    return re.sub(r'\\(.)', lambda m: _ESCAPES.get(m.group(1), m.group(1)), value, flags=re.DOTALL)


def split_quoted_list(value: str) -> List[str]:
    """Parse `"A";"B"` style lists (compatible printers and prints)."""
    if not value:
        return []
    return [unquote(item.strip()) for item in value.split(';') if item.strip()]
