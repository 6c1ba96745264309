"""
ANSI style helpers handed to formatters.

Every style is an open/close pair and can also be called to wrap text:

    styles.green.open + "ok" + styles.green.close
    styles.green("ok")

A StyleHelpers built with enabled=False hands out empty strings for every
code, so a formatter never needs to branch on whether colors are wanted.
"""

import re
from typing import Iterable, Mapping, NamedTuple, Optional

from snooplogg.colors import RGB, ns_to_rgb, rgb_to_ansi256
from snooplogg.records import DEFAULT_LEVELS, Level

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI SGR escape sequences."""
    return ANSI_RE.sub("", text)


class Style(NamedTuple):
    open: str
    close: str

    def __call__(self, text: str) -> str:
        return f"{self.open}{text}{self.close}"


# name → (open, close) SGR parameters
_CODES: dict[str, tuple[int, int]] = {
    # modifiers
    "reset": (0, 0),
    "bold": (1, 22),
    "dim": (2, 22),
    "italic": (3, 23),
    "underline": (4, 24),
    "inverse": (7, 27),
    "strikethrough": (9, 29),
    # foreground
    "black": (30, 39),
    "red": (31, 39),
    "green": (32, 39),
    "yellow": (33, 39),
    "blue": (34, 39),
    "magenta": (35, 39),
    "cyan": (36, 39),
    "white": (37, 39),
    "gray": (90, 39),
    "red_bright": (91, 39),
    "green_bright": (92, 39),
    "yellow_bright": (93, 39),
    "blue_bright": (94, 39),
    "magenta_bright": (95, 39),
    "cyan_bright": (96, 39),
    "white_bright": (97, 39),
    # background
    "bg_black": (40, 49),
    "bg_red": (41, 49),
    "bg_green": (42, 49),
    "bg_yellow": (43, 49),
    "bg_blue": (44, 49),
    "bg_magenta": (45, 49),
    "bg_cyan": (46, 49),
    "bg_white": (47, 49),
    "bg_gray": (100, 49),
}

STYLE_NAMES = frozenset(_CODES)

_EMPTY = Style("", "")


class StyleHelpers:
    """Named decorations plus the namespace color functions."""

    def __init__(self, enabled: bool = True, levels: Optional[Mapping[str, Level]] = None):
        self.enabled = enabled
        self._levels = levels if levels is not None else DEFAULT_LEVELS
        self._styles = {
            name: Style(f"\x1b[{o}m", f"\x1b[{c}m") if enabled else _EMPTY
            for name, (o, c) in _CODES.items()
        }

    def __getattr__(self, name: str) -> Style:
        try:
            return self.__dict__["_styles"][name]
        except KeyError:
            raise AttributeError(f"Unknown style '{name}'") from None

    def __getitem__(self, name: str) -> Style:
        return self._styles[name]

    @property
    def color_close(self) -> str:
        return "\x1b[39m" if self.enabled else ""

    @property
    def bg_color_close(self) -> str:
        return "\x1b[49m" if self.enabled else ""

    def ansi256(self, code: int) -> str:
        return f"\x1b[38;5;{code}m" if self.enabled else ""

    def bg_ansi256(self, code: int) -> str:
        return f"\x1b[48;5;{code}m" if self.enabled else ""

    def rgb_to_ansi256(self, r: int, g: int, b: int) -> int:
        return rgb_to_ansi256(r, g, b)

    def ns_to_rgb(self, ns: str) -> RGB:
        return ns_to_rgb(ns)

    def combine(self, names: Iterable[str]) -> Style:
        """Nest several styles; the first name is outermost."""
        picked = [self._styles[n] for n in names]
        return Style(
            "".join(s.open for s in picked),
            "".join(s.close for s in reversed(picked)),
        )

    def has_label(self, method: str) -> bool:
        level = self._levels.get(method)
        return level.label if level is not None else True

    def level_style(self, method: str) -> Style:
        """Style for a level label, from the controller's level table."""
        level = self._levels.get(method)
        if level is None or not level.styles:
            return self._styles["gray"]
        return self.combine(level.styles)
