"""
Tests for namespace colors and style helpers.
"""

import pytest

from snooplogg.colors import RGB, ns_to_rgb, rgb_to_ansi256
from snooplogg.records import Level
from snooplogg.styles import StyleHelpers, strip_ansi


# ═══════════════════════════════════════════════════════════════════
#  ns_to_rgb
# ═══════════════════════════════════════════════════════════════════

class TestNsToRgb:
    @pytest.mark.parametrize("ns, expected", [
        ("foo", (133, 163, 224)),
        ("bar", (188, 193, 240)),
        ("foo:bar", (158, 71, 51)),
        ("", (227, 177, 236)),
        ("日本", (165, 26, 13)),
        ("😀", (155, 222, 104)),
    ])
    def test_known_values(self, ns, expected):
        assert ns_to_rgb(ns) == expected

    def test_deterministic(self):
        assert ns_to_rgb("app:db") == ns_to_rgb("app:db")

    def test_returns_rgb_in_range(self):
        color = ns_to_rgb("anything")
        assert isinstance(color, RGB)
        assert all(0 <= c <= 255 for c in color)


# ═══════════════════════════════════════════════════════════════════
#  rgb_to_ansi256
# ═══════════════════════════════════════════════════════════════════

class TestRgbToAnsi256:
    @pytest.mark.parametrize("rgb, expected", [
        ((0, 0, 0), 16),
        ((255, 255, 255), 231),
        ((128, 128, 128), 244),
        ((255, 0, 0), 196),
        ((133, 163, 224), 146),
        ((188, 193, 240), 189),
        ((158, 71, 51), 131),
    ])
    def test_known_values(self, rgb, expected):
        assert rgb_to_ansi256(*rgb) == expected


# ═══════════════════════════════════════════════════════════════════
#  StyleHelpers
# ═══════════════════════════════════════════════════════════════════

class TestStyleHelpers:
    def test_enabled_wraps(self):
        styles = StyleHelpers(enabled=True)
        assert styles.green("ok") == "\x1b[32mok\x1b[39m"
        assert styles.bold.open == "\x1b[1m"
        assert styles.ansi256(146) == "\x1b[38;5;146m"
        assert styles.bg_ansi256(146) == "\x1b[48;5;146m"
        assert styles.color_close == "\x1b[39m"

    def test_disabled_is_empty(self):
        styles = StyleHelpers(enabled=False)
        assert styles.green("ok") == "ok"
        assert styles.red_bright.open == ""
        assert styles.ansi256(146) == ""
        assert styles.bg_ansi256(146) == ""
        assert styles.color_close == ""
        assert styles.bg_color_close == ""

    def test_unknown_style(self):
        with pytest.raises(AttributeError, match="Unknown style"):
            StyleHelpers().sparkly

    def test_combine_nests(self):
        styles = StyleHelpers()
        combined = styles.combine(["bg_red", "white"])
        assert combined("x") == "\x1b[41m\x1b[37mx\x1b[39m\x1b[49m"

    def test_level_style_from_table(self):
        styles = StyleHelpers()
        assert styles.level_style("info")("INFO") == styles.green("INFO")
        assert styles.level_style("mystery")("?") == styles.gray("?")

    def test_custom_level_table(self):
        styles = StyleHelpers(levels={"audit": Level("audit", ("cyan",))})
        assert styles.level_style("audit")("A") == styles.cyan("A")
        assert styles.has_label("audit")

    def test_log_has_no_label(self):
        assert not StyleHelpers().has_label("log")
        assert StyleHelpers().has_label("info")

    def test_strip_ansi(self):
        styles = StyleHelpers()
        text = styles.bold(styles.green("hi")) + styles.ansi256(42) + "!"
        assert strip_ansi(text) == "hi!"
