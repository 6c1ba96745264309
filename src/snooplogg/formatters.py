"""
Default renderer and element table.

A formatter is any callable (RenderMessage, StyleHelpers) -> str. The
default one renders

    "<uptime> <namespace> <LEVEL> <line>"

repeating the prefix for every line of the message. Its pieces come from
the element table, so a controller or a single sink can swap out e.g. how
the namespace is drawn without writing a whole formatter.

Elements:
    error(err, styles)                exception + traceback
    message(line, method, styles)     one line of message text
    method(name, styles)              level label
    namespace(ns, styles)             namespace
    timestamp(ts, styles)             wall clock time
    uptime(seconds, styles)           process uptime
"""

import json
import math
import pprint
import re
import traceback
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from snooplogg.records import RenderMessage
from snooplogg.styles import StyleHelpers

LogFormatter = Callable[[RenderMessage, StyleHelpers], str]

_TOKEN_RE = re.compile(r"%[sdifjoOc%]")


# ── Argument formatting ──────────────────────────────────────────────

def inspect_value(value: Any) -> str:
    """Debug rendering for containers."""
    return pprint.pformat(value, depth=4, sort_dicts=False)


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return inspect_value(value)
    return str(value)


def _number(value: Any, integer: bool = False) -> str:
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return str(value)
    try:
        num = float(value)
    except (TypeError, ValueError):
        return "NaN"
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    if integer or num.is_integer():
        return str(int(num))
    return repr(num)


def _json(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except ValueError:
        return "[Circular]"
    except TypeError:
        # keys json cannot encode
        return inspect_value(value)


_CONVERTERS: dict[str, Callable[[Any], str]] = {
    "s": _stringify,
    "d": _number,
    "i": lambda v: _number(v, integer=True),
    "f": _number,
    "j": _json,
    "o": inspect_value,
    "O": inspect_value,
    "c": lambda v: "",
}


def format_args(args: Sequence[Any]) -> str:
    """
    printf-style formatting of log call arguments.

    If the first argument is a string, %s %d %i %f %j %o %O %c tokens in it
    consume the following arguments in order and %% is a literal percent.
    Arguments left over are appended, space separated.
    """
    if not args:
        return ""

    first = args[0]
    if not isinstance(first, str):
        return " ".join(_stringify(a) for a in args)
    if len(args) == 1:
        return first

    remaining = list(args[1:])

    def _replace(match: re.Match) -> str:
        token = match.group()
        if token == "%%":
            return "%"
        if not remaining:
            return token
        return _CONVERTERS[token[1]](remaining.pop(0))

    text = _TOKEN_RE.sub(_replace, first)
    if remaining:
        text = " ".join([text, *(_stringify(v) for v in remaining)])
    return text


# ── Default elements ─────────────────────────────────────────────────

def render_error(err: BaseException, styles: StyleHelpers) -> str:
    detail = str(err)
    name = type(err).__name__
    message = styles.red_bright(f"{name}: {detail}" if detail else name)

    frames = traceback.extract_tb(err.__traceback__) if err.__traceback__ else []
    if not frames:
        return message

    lines = [message]
    last = len(frames) - 1
    for i, frame in enumerate(frames):
        branch = "└─" if i == last else "├─"
        func = styles.white_bright(styles.italic(frame.name))
        site = styles.white(f"({frame.filename}:{frame.lineno})")
        lines.append(f"  {styles.gray(branch)} {func} {site}")
    return "\n".join(lines)


def render_message(line: str, method: str, styles: StyleHelpers) -> str:
    if method == "trace":
        return styles.white(line)
    return line


def render_method(name: str, styles: StyleHelpers) -> str:
    return styles.level_style(name)(name.upper().ljust(5))


def render_namespace(ns: str, styles: StyleHelpers) -> str:
    r, g, b = styles.ns_to_rgb(ns)
    return f"{styles.ansi256(styles.rgb_to_ansi256(r, g, b))}{ns}{styles.color_close}"


def render_timestamp(ts: datetime, styles: StyleHelpers) -> str:
    text = ts.strftime("%Y-%m-%d %H:%M:%S.") + f"{ts.microsecond // 1000:03d}"
    return styles.gray(text)


def render_uptime(seconds: float, styles: StyleHelpers) -> str:
    return styles.gray(f"{seconds:8.3f}s")


DEFAULT_ELEMENTS: Mapping[str, Callable[..., str]] = MappingProxyType({
    "error": render_error,
    "message": render_message,
    "method": render_method,
    "namespace": render_namespace,
    "timestamp": render_timestamp,
    "uptime": render_uptime,
})

ELEMENT_NAMES = frozenset(DEFAULT_ELEMENTS)


def default_formatter(msg: RenderMessage, styles: StyleHelpers) -> str:
    """Render "<uptime> <namespace> <LEVEL> <line>" for every line."""
    elements = msg.elements

    prefix = f"{elements['uptime'](msg.uptime, styles)} "
    if msg.ns:
        prefix += f"{elements['namespace'](msg.ns, styles)} "
    if msg.method and styles.has_label(msg.method):
        prefix += f"{elements['method'](msg.method, styles)} "

    args = [
        elements["error"](arg, styles) if isinstance(arg, BaseException) else arg
        for arg in msg.args
    ]

    return "\n".join(
        prefix + elements["message"](line, msg.method, styles)
        for line in format_args(args).split("\n")
    )
