from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

DEFAULT_PRIMARY = "#000000"
_HEX_RE = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True, slots=True)
class Theme:
    primary_color: str = DEFAULT_PRIMARY
    secondary_color: str | None = None

    @classmethod
    def from_record(cls, raw: Any) -> Theme:
        """Build a theme from the stored ``{primaryColor, secondaryColor}`` JSON."""
        if not isinstance(raw, Mapping):
            return cls()
        primary = _coerce_hex(raw.get("primaryColor")) or DEFAULT_PRIMARY
        return cls(primary_color=primary, secondary_color=_coerce_hex(raw.get("secondaryColor")))

    def to_record(self) -> dict[str, str]:
        record = {"primaryColor": self.primary_color}
        if self.secondary_color:
            record["secondaryColor"] = self.secondary_color
        return record


@dataclass(frozen=True, slots=True)
class Palette:
    primary: str
    primary_soft: str
    primary_strong: str
    secondary: str
    page_bg: str
    card_bg: str
    card_border: str
    heading_color: str
    text_color: str
    accent: str
    text_on_primary: str
    text_on_light: str

    def css_variables(self) -> dict[str, str]:
        return {f"--{name.replace('_', '-')}": value for name, value in asdict(self).items()}

    def css_text(self) -> str:
        return "; ".join(f"{name}: {value}" for name, value in self.css_variables().items())


def _coerce_hex(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not _HEX_RE.match(candidate):
        return None
    digits = candidate.lstrip("#")
    if len(digits) == 3:
        digits = "".join(char * 2 for char in digits)
    return f"#{digits.lower()}"


def hex_to_hsl(color: str) -> tuple[int, int, int]:
    digits = color.lstrip("#")
    r = int(digits[0:2], 16) / 255
    g = int(digits[2:4], 16) / 255
    b = int(digits[4:6], 16) / 255

    high = max(r, g, b)
    low = min(r, g, b)
    hue = 0.0
    saturation = 0.0
    lightness = (high + low) / 2

    if high != low:
        delta = high - low
        saturation = delta / (2 - high - low) if lightness > 0.5 else delta / (high + low)
        if high == r:
            hue = ((g - b) / delta + (6 if g < b else 0)) / 6
        elif high == g:
            hue = ((b - r) / delta + 2) / 6
        else:
            hue = ((r - g) / delta + 4) / 6

    return _round(hue * 360), _round(saturation * 100), _round(lightness * 100)


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    h = hue / 360
    s = saturation / 100
    l = lightness / 100  # noqa: E741

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_rgb(p, q, h + 1 / 3)
        g = _hue_to_rgb(p, q, h)
        b = _hue_to_rgb(p, q, h - 1 / 3)

    return "#" + "".join(f"{_round(channel * 255):02x}" for channel in (r, g, b))


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def _round(value: float) -> int:
    # Half-up rounding, matching the browser-side palette.
    return int(value + 0.5)


def lighten(color: str, amount: float) -> str:
    hue, saturation, lightness = hex_to_hsl(color)
    return hsl_to_hex(hue, saturation, min(100, lightness + (100 - lightness) * amount))


def darken(color: str, amount: float) -> str:
    hue, saturation, lightness = hex_to_hsl(color)
    return hsl_to_hex(hue, saturation, max(0, lightness - lightness * amount))


def generate_palette(theme: Theme) -> Palette:
    primary = _coerce_hex(theme.primary_color) or DEFAULT_PRIMARY
    _, _, primary_lightness = hex_to_hsl(primary)
    very_dark = primary_lightness < 20

    secondary = _coerce_hex(theme.secondary_color)
    if secondary is None:
        secondary = "#ffffff" if primary_lightness < 50 else "#000000"

    return Palette(
        primary=primary,
        primary_soft=lighten(primary, 0.92),
        primary_strong=darken(primary, 0.15),
        secondary=secondary,
        page_bg="#f9fafb" if very_dark else lighten(primary, 0.97),
        card_bg="#ffffff" if very_dark else lighten(primary, 0.98),
        card_border=lighten(primary, 0.85),
        heading_color="#111827" if very_dark else darken(primary, 0.3),
        text_color="#4b5563" if very_dark else darken(primary, 0.4),
        accent=primary,
        text_on_primary=secondary,
        text_on_light="#111827",
    )
