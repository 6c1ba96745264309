"""
Tests for argument formatting, default elements and the default formatter.
"""

from datetime import datetime, timezone
from types import MappingProxyType

import pytest

from snooplogg.formatters import (
    DEFAULT_ELEMENTS,
    default_formatter,
    format_args,
    render_error,
    render_method,
    render_timestamp,
    render_uptime,
)
from snooplogg.records import RenderMessage
from snooplogg.styles import StyleHelpers, strip_ansi

PLAIN = StyleHelpers(enabled=False)


def make_view(*args, method="info", ns="", colors=False, elements=None, uptime=1.5):
    return RenderMessage(
        args=args,
        method=method,
        ns=ns,
        colors=colors,
        elements=MappingProxyType({**DEFAULT_ELEMENTS, **(elements or {})}),
        ts=datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc),
        uptime=uptime,
    )


# ═══════════════════════════════════════════════════════════════════
#  format_args
# ═══════════════════════════════════════════════════════════════════

class TestFormatArgs:
    def test_empty(self):
        assert format_args([]) == ""

    def test_single_string_untouched(self):
        assert format_args(["100%s"]) == "100%s"

    def test_string_token(self):
        assert format_args(["hello %s", "world"]) == "hello world"

    def test_number_tokens(self):
        assert format_args(["x=%d", 3]) == "x=3"
        assert format_args(["%d", 2.0]) == "2"
        assert format_args(["%i", 2.7]) == "2"
        assert format_args(["%f", 2.5]) == "2.5"
        assert format_args(["%d", "abc"]) == "NaN"

    def test_json_token(self):
        assert format_args(["%j", {"a": [1, 2]}]) == '{"a": [1, 2]}'

    def test_json_circular(self):
        data = []
        data.append(data)
        assert format_args(["%j", data]) == "[Circular]"

    def test_json_unencodable_keys(self):
        assert format_args(["%j", {(1, 2): 3}]) == "{(1, 2): 3}"
        assert format_args(["state %j", {None: 1, (0,): "x"}]) == "state {None: 1, (0,): 'x'}"

    def test_inspect_tokens(self):
        assert format_args(["%o", {"a": 1}]) == "{'a': 1}"
        assert format_args(["%O", [1, 2]]) == "[1, 2]"

    def test_css_token_consumed(self):
        assert format_args(["%cred", "color: red"]) == "red"

    def test_percent_escape(self):
        assert format_args(["100%% of %s", "it"]) == "100% of it"

    def test_missing_argument_stays_literal(self):
        assert format_args(["%s and %s", "a"]) == "a and %s"

    def test_leftover_arguments_appended(self):
        assert format_args(["a", "b", 3]) == "a b 3"
        assert format_args(["%s", 1, 2]) == "1 2"

    def test_non_string_first(self):
        assert format_args([1, "two", [3]]) == "1 two [3]"

    def test_dict_argument_inspected(self):
        assert format_args(["cfg", {"k": "v"}]) == "cfg {'k': 'v'}"


# ═══════════════════════════════════════════════════════════════════
#  Elements
# ═══════════════════════════════════════════════════════════════════

class TestElements:
    def test_method_label_padded(self):
        assert render_method("info", PLAIN) == "INFO "
        assert render_method("panic", PLAIN) == "PANIC"

    def test_method_label_colored(self):
        styles = StyleHelpers(enabled=True)
        assert render_method("info", styles) == "\x1b[32mINFO \x1b[39m"

    def test_uptime(self):
        assert render_uptime(1.5, PLAIN) == "   1.500s"

    def test_timestamp(self):
        ts = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert render_timestamp(ts, PLAIN) == "2024-01-02 03:04:05.678"

    def test_error_without_traceback(self):
        assert render_error(ValueError("bad"), PLAIN) == "ValueError: bad"
        assert render_error(KeyError(), PLAIN) == "KeyError"

    def test_error_with_traceback(self):
        def explode():
            raise RuntimeError("boom")

        try:
            explode()
        except RuntimeError as err:
            text = render_error(err, PLAIN)

        lines = text.split("\n")
        assert lines[0] == "RuntimeError: boom"
        assert lines[-1].startswith("  └─ explode (")
        assert all(line.startswith("  ├─ ") for line in lines[1:-1])
        assert "test_formatters.py:" in lines[-1]


# ═══════════════════════════════════════════════════════════════════
#  default_formatter
# ═══════════════════════════════════════════════════════════════════

class TestDefaultFormatter:
    def test_layout(self):
        out = default_formatter(make_view("x=%d", 3, ns="app:db"), PLAIN)
        assert out == "   1.500s app:db INFO  x=3"

    def test_root_namespace_omitted(self):
        out = default_formatter(make_view("hi"), PLAIN)
        assert out == "   1.500s INFO  hi"

    def test_log_has_no_label(self):
        out = default_formatter(make_view("plain", method="log", ns="a"), PLAIN)
        assert out == "   1.500s a plain"

    def test_multiline_prefixed(self):
        out = default_formatter(make_view("one\ntwo", ns="a"), PLAIN)
        assert out.split("\n") == ["   1.500s a INFO  one", "   1.500s a INFO  two"]

    def test_exception_argument(self):
        out = default_formatter(make_view("failed:", ValueError("bad")), PLAIN)
        assert out == "   1.500s INFO  failed: ValueError: bad"

    def test_custom_element(self):
        view = make_view("hi", ns="a", elements={"namespace": lambda ns, s: f"[{ns}]"})
        assert default_formatter(view, PLAIN) == "   1.500s [a] INFO  hi"

    def test_colored_output_strips_to_plain(self):
        styles = StyleHelpers(enabled=True)
        out = default_formatter(make_view("x=%d", 3, ns="app:db", colors=True), styles)
        assert "\x1b[" in out
        assert strip_ansi(out) == "   1.500s app:db INFO  x=3"
