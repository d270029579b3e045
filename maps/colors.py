"""
Colour parsing for map display settings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

NAMED_COLORS = {
    "black": 0x000000,
    "silver": 0xC0C0C0,
    "gray": 0x808080,
    "grey": 0x808080,
    "white": 0xFFFFFF,
    "maroon": 0x800000,
    "red": 0xFF0000,
    "purple": 0x800080,
    "fuchsia": 0xFF00FF,
    "magenta": 0xFF00FF,
    "green": 0x008000,
    "lime": 0x00FF00,
    "olive": 0x808000,
    "yellow": 0xFFFF00,
    "navy": 0x000080,
    "blue": 0x0000FF,
    "teal": 0x008080,
    "aqua": 0x00FFFF,
    "cyan": 0x00FFFF,
    "orange": 0xFFA500,
    "skyblue": 0x87CEEB,
    "lightblue": 0xADD8E6,
    "deepskyblue": 0x00BFFF,
    "darkblue": 0x00008B,
}

_FUNCTIONAL = re.compile(r"^rgba?\(\s*([^)]*)\)$")
_HEX_DIGITS = re.compile(r"^[0-9a-f]+$")


@dataclass(frozen=True, slots=True)
class Color:
    """Colour with float channels in [0, 1]."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_rgb_bytes(cls, red: int, green: int, blue: int, alpha: int = 255) -> "Color":
        return cls(red / 255.0, green / 255.0, blue / 255.0, alpha / 255.0)

    @classmethod
    def from_argb(cls, value: int) -> "Color":
        return cls.from_rgb_bytes(
            (value >> 16) & 0xFF,
            (value >> 8) & 0xFF,
            value & 0xFF,
            (value >> 24) & 0xFF,
        )


def _expand_short_hex(digits: str) -> str:
    return "".join(ch * 2 for ch in digits)


def _parse_hex(digits: str) -> Color:
    if not _HEX_DIGITS.match(digits):
        raise ValueError(f"Invalid hex digits: {digits!r}")
    if len(digits) in (3, 4):
        digits = _expand_short_hex(digits)
    if len(digits) == 6:
        digits += "ff"
    if len(digits) != 8:
        raise ValueError(f"Invalid hex colour length: #{digits}")
    value = int(digits, 16)
    return Color.from_rgb_bytes(
        (value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF
    )


def _parse_channel(text: str) -> int:
    text = text.strip()
    if text.endswith("%"):
        return round(float(text[:-1]) * 255 / 100)
    return int(round(float(text)))


def _parse_functional(arguments: str) -> Color:
    parts = [part for part in re.split(r"[\s,/]+", arguments.strip()) if part]
    if len(parts) not in (3, 4):
        raise ValueError(f"Expected 3 or 4 colour components, got {len(parts)}")
    red, green, blue = (_parse_channel(part) for part in parts[:3])
    alpha = 255
    if len(parts) == 4:
        alpha_text = parts[3]
        alpha = (
            _parse_channel(alpha_text)
            if alpha_text.endswith("%")
            else round(float(alpha_text) * 255)
        )
    channels = (red, green, blue, alpha)
    if any(channel < 0 or channel > 255 for channel in channels):
        raise ValueError("Colour components out of range")
    return Color.from_rgb_bytes(*channels)


def parse_color(text: str) -> Color:
    """
    Parse a colour string.

    Accepts CSS hex notation (``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``),
    ``0xRRGGBB`` / ``0xAARRGGBB``, ``rgb()`` / ``rgba()``, a CSS colour name, or a
    decimal ARGB integer.

    Raises:
        ValueError: if the string is not a recognised colour.
    """
    if not isinstance(text, str):
        raise ValueError(f"Colour must be a string, got {type(text).__name__}")
    value = text.strip().lower()
    if not value:
        raise ValueError("Colour string is empty")
    try:
        if value.startswith("#"):
            return _parse_hex(value[1:])
        if value.startswith("0x"):
            digits = value[2:]
            if not _HEX_DIGITS.match(digits):
                raise ValueError(f"Invalid hex digits: {digits!r}")
            if len(digits) == 6:
                return _parse_hex(digits)
            if len(digits) == 8:
                return Color.from_argb(int(digits, 16))
            raise ValueError(f"Invalid hex colour length: {text}")
        match = _FUNCTIONAL.match(value)
        if match:
            return _parse_functional(match.group(1))
        if value in NAMED_COLORS:
            return Color.from_argb(0xFF000000 | NAMED_COLORS[value])
        if value.isdigit():
            return Color.from_argb(int(value) & 0xFFFFFFFF)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Invalid colour {text!r}: {exc}") from exc
    raise ValueError(f"Unrecognised colour {text!r}")
