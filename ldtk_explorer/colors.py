"""
Hex color parsing for LDtk background and property colors

LDtk stores colors as "#RRGGBB" strings. The short "#RGB" form is also
accepted, each digit being duplicated ("#F80" == "#FF8800"). Alpha is
never encoded, so parsed colors are always fully opaque.
"""

import logging
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

_HEX_DIGITS = "0123456789abcdefABCDEF"


class Color(NamedTuple):
    """RGBA color, each channel 0-255."""
    r: int
    g: int
    b: int
    a: int = 255


# Zero value; used whenever a color is unset or could not be parsed
TRANSPARENT = Color(0, 0, 0, 0)


def parse_hex_color(text: str) -> Color:
    """
    Parse "#RRGGBB" or "#RGB" into an opaque Color.

    Raises:
    -------
    ValueError : if the string is not '#'-prefixed, has a length other
                 than 4 or 7, or contains a non-hex digit
    """
    if not isinstance(text, str) or not text.startswith("#"):
        raise ValueError(f"invalid color {text!r}: missing '#' prefix")

    digits = text[1:]
    if any(ch not in _HEX_DIGITS for ch in digits):
        raise ValueError(f"invalid color {text!r}: non-hex digit")

    if len(digits) == 6:
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    elif len(digits) == 3:
        r, g, b = (int(ch, 16) * 17 for ch in digits)
    else:
        raise ValueError(f"invalid color {text!r}: expected 3 or 6 digits")

    return Color(r, g, b, 255)


def parse_hex_color_or_default(text: Optional[str],
                               default: Color = TRANSPARENT) -> Color:
    """
    Parse a color, falling back to `default` instead of raising.

    An unset (None or empty) string returns the default silently; a
    malformed one is logged as a warning. Either way the caller gets a
    usable Color and loading continues.
    """
    if not text:
        return default
    try:
        return parse_hex_color(text)
    except ValueError as e:
        logger.warning("Ignoring malformed color: %s", e)
        return default
