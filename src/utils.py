from __future__ import annotations

from typing import Iterable


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    return tuple(int(color[i : i + 2], 16) for i in range(0, 6, 2))


def rgb_to_hex(rgb: Iterable[int]) -> str:
    r, g, b = rgb
    return "#{:02x}{:02x}{:02x}".format(r, g, b)


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """Convert CSS-style HSL (degrees, percent, percent) to 8-bit RGB."""
    h = (hue % 360) / 360.0
    s = max(0.0, min(100.0, saturation)) / 100.0
    l = max(0.0, min(100.0, lightness)) / 100.0

    if s == 0:
        gray = int(round(l * 255))
        return gray, gray, gray

    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q

    def channel(t: float) -> int:
        t %= 1.0
        if t < 1 / 6:
            value = p + (q - p) * 6 * t
        elif t < 1 / 2:
            value = q
        elif t < 2 / 3:
            value = p + (q - p) * (2 / 3 - t) * 6
        else:
            value = p
        return int(round(value * 255))

    return channel(h + 1 / 3), channel(h), channel(h - 1 / 3)


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    return rgb_to_hex(hsl_to_rgb(hue, saturation, lightness))


def blend_hex_colors(start: str, end: str, t: float) -> str:
    sr, sg, sb = hex_to_rgb(start)
    er, eg, eb = hex_to_rgb(end)
    r = int(sr + (er - sr) * t)
    g = int(sg + (eg - sg) * t)
    b = int(sb + (eb - sb) * t)
    return rgb_to_hex((r, g, b))


def ideal_text_color(hex_color: str) -> str:
    r, g, b = hex_to_rgb(hex_color)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#1f1f1f" if luminance > 0.6 else "#ffffff"
