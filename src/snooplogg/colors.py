"""
Deterministic namespace colors.

Each namespace hashes to a stable RGB color so the same subsystem always
renders in the same color, in every process, without any shared state.
"""

import math
from typing import NamedTuple

_MASK32 = 0xFFFFFFFF


class RGB(NamedTuple):
    r: int
    g: int
    b: int


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & _MASK32


def _round(x: float) -> int:
    """Round half up (not banker's rounding)."""
    return math.floor(x + 0.5)


def _hash53(text: str) -> int:
    # Two independently seeded lanes over UTF-16 code units, then an
    # avalanche pass mixing each lane into the other.
    h1 = 0xDEADBEEF
    h2 = 0x41C6CE57
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        ch = data[i] | (data[i + 1] << 8)
        h1 = _imul(h1 ^ ch, 2654435761)
        h2 = _imul(h2 ^ ch, 1597334677)
    h1 = _imul(h1 ^ (h1 >> 16), 2246822507)
    h1 ^= _imul(h2 ^ (h2 >> 13), 3266489909)
    h2 = _imul(h2 ^ (h2 >> 16), 2246822507)
    h2 ^= _imul(h1 ^ (h1 >> 13), 3266489909)
    return 4294967296 * (0x1FFFFF & h2) + h1


def ns_to_rgb(text: str) -> RGB:
    """
    Map a namespace to an RGB color.

    Hue covers the full wheel, saturation stays in [0.5, 1.0) and lightness
    in [0.3, 0.9) so colors are never close to black or white.
    """
    value = _hash53(text)
    h = value % 360
    s = ((value % 50) + 50) / 100
    l = ((value % 60) + 30) / 100
    a = s * min(l, 1 - l)

    def f(n: int) -> float:
        k = (n + h / 30) % 12
        return l - a * max(min(k - 3, 9 - k, 1), -1)

    return RGB(_round(255 * f(0)), _round(255 * f(8)), _round(255 * f(4)))


def rgb_to_ansi256(r: int, g: int, b: int) -> int:
    """Nearest xterm-256 palette index (6x6x6 cube or gray ramp)."""
    if r == g == b:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return _round(((r - 8) / 247) * 24) + 232

    return (
        16
        + 36 * _round(r / 255 * 5)
        + 6 * _round(g / 255 * 5)
        + _round(b / 255 * 5)
    )
