"""
Logger nodes and the SnoopLogg controller.

A SnoopLogg is the root of a namespace tree. child() walks down the tree,
creating each node once; every node exposes one emitter per level. An
emitter stamps a LogMessage and hands it to SnoopLogg.dispatch(), the one
place where messages are buffered, filtered, rendered and fanned out.

    log = SnoopLogg().enable("*").pipe(StreamSink())
    db = log.child("app").child("db")
    db.info("connected to %s", host)      # "   0.012s app:db INFO  connected to ..."

A controller also publishes whatever its own loggers emit on the snoop bus,
so another controller can snoop() and show those messages too.
"""

import threading
import uuid
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from snooplogg.buffer import HistoryBuffer, check_size
from snooplogg.bus import SnoopBus
from snooplogg.filters import EnableSpec, NamespaceFilter, compile_filter
from snooplogg.formatters import DEFAULT_ELEMENTS, ELEMENT_NAMES, LogFormatter, default_formatter
from snooplogg.records import DEFAULT_LEVELS, Level, LogMessage, RenderMessage, validate_name
from snooplogg.styles import STYLE_NAMES, StyleHelpers

LogMethod = Callable[..., "Logger"]

CONFIG_OPTIONS = frozenset({"format", "elements", "colors", "history_size"})


class Logger:
    """
    One node of the namespace tree.

    Nodes are created by their parent's child() and live as long as the
    controller. Emitters are memoized, so `info = node.info` can be kept and
    called later.
    """

    def __init__(
        self,
        name: str | None = None,
        parent: Optional["Logger"] = None,
        root: Optional["SnoopLogg"] = None,
    ):
        if name is None:
            self.ns_path: tuple[str, ...] = ()
        else:
            validate_name(name)
            self.ns_path = (*parent.ns_path, name) if parent is not None else (name,)
        self.ns = ":".join(self.ns_path)
        self.parent = parent
        self._root = root
        self._children: dict[str, Logger] = {}
        self._emitters: dict[str, LogMethod] = {}

    @property
    def root(self) -> "SnoopLogg":
        return self._root

    @property
    def name(self) -> str | None:
        return self.ns_path[-1] if self.ns_path else None

    def child(self, name: str) -> "Logger":
        """Get or create the child node for name."""
        validate_name(name)
        node = self._children.get(name)
        if node is None:
            with self._root._lock:
                node = self._children.get(name)
                if node is None:
                    node = Logger(name, self, self._root)
                    self._children[name] = node
        return node

    @property
    def children(self) -> Mapping[str, "Logger"]:
        return MappingProxyType(self._children)

    @property
    def enabled(self) -> bool:
        return self._root.is_enabled(self.ns)

    # ── Emitters ──────────────────────────────────────────────────

    def emitter(self, method: str) -> LogMethod:
        """Memoized emitter for any level in the controller's level table."""
        fn = self._emitters.get(method)
        if fn is not None:
            return fn

        if method not in self._root.levels:
            raise ValueError(f"Unknown log level '{method}'")

        def emit(*args: Any) -> "Logger":
            root = self._root
            root.dispatch(LogMessage.create(root.id, self.ns, method, args))
            return self

        emit.__name__ = method
        emit.__qualname__ = f"Logger.{method}"
        return self._emitters.setdefault(method, emit)

    def emit(self, method: str, *args: Any) -> "Logger":
        return self.emitter(method)(*args)

    @property
    def log(self) -> LogMethod:
        return self.emitter("log")

    @property
    def trace(self) -> LogMethod:
        return self.emitter("trace")

    @property
    def debug(self) -> LogMethod:
        return self.emitter("debug")

    @property
    def info(self) -> LogMethod:
        return self.emitter("info")

    @property
    def warn(self) -> LogMethod:
        return self.emitter("warn")

    @property
    def error(self) -> LogMethod:
        return self.emitter("error")

    @property
    def panic(self) -> LogMethod:
        return self.emitter("panic")

    def __repr__(self) -> str:
        return f"Logger(ns={self.ns!r})"


@dataclass
class SinkMeta:
    """Per-sink render overrides and the auto-detach hook."""
    format: Optional[LogFormatter] = None
    elements: Optional[dict[str, Callable[..., str]]] = None
    colors: Optional[bool] = None
    on_end: Optional[Callable[[], None]] = None


class SnoopLogg(Logger):
    """
    Controller and root of a namespace tree.

    Owns the enable filter, the history buffer, the attached sinks with
    their overrides, the level table and the snoop subscription. All
    mutable state is guarded by one re-entrant lock.

    Usage:
        log = SnoopLogg(history_size=100).enable("app,-app:noisy")
        log.pipe(StreamSink(), flush=True)
        log.child("app").warn("disk at %d%%", 91)

        other = SnoopLogg().snoop("lib:")   # show everything log emits too
    """

    _instance: Optional["SnoopLogg"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        conf: Mapping[str, Any] | None = None,
        *,
        bus: SnoopBus | None = None,
        isolate_sink_errors: bool = False,
        **options: Any,
    ):
        self._lock = threading.RLock()
        super().__init__(root=self)
        self.id = uuid.uuid4().hex
        self.isolate_sink_errors = isolate_sink_errors
        self._bus = bus if bus is not None else SnoopBus.instance()
        self._filter: NamespaceFilter = compile_filter(None)
        self._history: HistoryBuffer[LogMessage] = HistoryBuffer(0)
        self._sinks: dict[int, tuple[Any, SinkMeta]] = {}
        self._format: Optional[LogFormatter] = None
        self._elements: dict[str, Callable[..., str]] = {}
        self._colors: Optional[bool] = None
        self._levels: dict[str, Level] = dict(DEFAULT_LEVELS)
        self._snoop_token: Optional[int] = None
        self._styles = {
            flag: StyleHelpers(enabled=flag, levels=self.levels) for flag in (True, False)
        }

        if conf is not None or options:
            self.config(conf, **options)

    # ── Process default ───────────────────────────────────────────

    @classmethod
    def instance(cls) -> "SnoopLogg":
        """
        Get or create the process default controller, configured from the
        environment (SNOOPLOGG / DEBUG, SNOOPLOGG_MAX_BUFFER_SIZE) and piped
        to stderr.
        """
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    from snooplogg.config import SnoopLoggConfig, build_controller
                    cls._instance = build_controller(SnoopLoggConfig.from_env())
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Destroy the process default controller. For tests."""
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.destroy()
                cls._instance = None

    # ── Configuration ─────────────────────────────────────────────

    def config(self, conf: Mapping[str, Any] | None = None, **options: Any) -> "SnoopLogg":
        """
        Set render options: format, elements, colors, history_size.
        Everything is validated before anything is applied.
        """
        if conf is None:
            conf = {}
        elif not isinstance(conf, Mapping):
            raise TypeError("Expected config options to be a mapping")

        opts = {**conf, **options}
        unknown = set(opts) - CONFIG_OPTIONS
        if unknown:
            raise ValueError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

        updates: dict[str, Any] = {}
        if "format" in opts:
            updates["format"] = _check_format(opts["format"])
        if "elements" in opts:
            updates["elements"] = _check_elements(opts["elements"]) or {}
        if "colors" in opts:
            updates["colors"] = _check_colors(opts["colors"])
        if "history_size" in opts:
            try:
                updates["history_size"] = check_size(opts["history_size"], "max size")
            except (TypeError, ValueError) as err:
                raise type(err)(f"Invalid history size: {err}") from err

        with self._lock:
            if "format" in updates:
                self._format = updates["format"]
            if "elements" in updates:
                self._elements = updates["elements"]
            if "colors" in updates:
                self._colors = updates["colors"]
            if "history_size" in updates:
                self._history.resize(updates["history_size"])
        return self

    @property
    def levels(self) -> Mapping[str, Level]:
        return MappingProxyType(self._levels)

    def add_level(
        self,
        name: str,
        styles: Iterable[str] = (),
        label: bool = True,
    ) -> "SnoopLogg":
        """Register a level for this controller only."""
        validate_name(name, "level name")
        styles = tuple(styles)
        unknown = [s for s in styles if s not in STYLE_NAMES]
        if unknown:
            raise ValueError(f"Unknown style(s): {', '.join(unknown)}")
        with self._lock:
            self._levels[name] = Level(name, styles, label)
        return self

    # ── Enablement ────────────────────────────────────────────────

    def enable(self, spec: EnableSpec = None) -> "SnoopLogg":
        """Replace the filter. "*" = everything, None/"" = nothing."""
        compiled = compile_filter(spec)
        with self._lock:
            self._filter = compiled
        return self

    def is_enabled(self, ns: str | None) -> bool:
        return self._filter.is_enabled(ns)

    @property
    def filter(self) -> NamespaceFilter:
        return self._filter

    # ── History ───────────────────────────────────────────────────

    @property
    def history(self) -> HistoryBuffer[LogMessage]:
        return self._history

    # ── Sinks ─────────────────────────────────────────────────────

    @property
    def sinks(self) -> tuple[Any, ...]:
        with self._lock:
            return tuple(sink for sink, _ in self._sinks.values())

    def pipe(
        self,
        sink: Any,
        *,
        flush: bool = False,
        format: Optional[LogFormatter] = None,
        elements: Optional[Mapping[str, Callable[..., str]]] = None,
        colors: Optional[bool] = None,
    ) -> "SnoopLogg":
        """
        Attach a sink. Attaching the same sink again does nothing.
        flush=True replays the history to this sink, oldest first, keeping
        only messages the current filter enables.
        """
        _check_sink(sink)
        meta = SinkMeta(
            format=_check_format(format),
            elements=_check_elements(elements),
            colors=_check_colors(colors),
        )

        with self._lock:
            key = id(sink)
            if key in self._sinks:
                return self

            add_listener = getattr(sink, "add_end_listener", None)
            if callable(add_listener):
                meta.on_end = lambda: self.unpipe(sink)
                add_listener(meta.on_end)

            self._sinks[key] = (sink, meta)

            if flush:
                for msg in self._history:
                    if self._filter.is_enabled(msg.ns):
                        self._write(sink, meta, msg)
        return self

    def unpipe(self, sink: Any) -> "SnoopLogg":
        """Detach a sink. Does nothing if it is not attached."""
        _check_sink(sink)
        with self._lock:
            entry = self._sinks.pop(id(sink), None)

        if entry is not None and entry[1].on_end is not None:
            remove_listener = getattr(sink, "remove_end_listener", None)
            if callable(remove_listener):
                remove_listener(entry[1].on_end)
        return self

    # ── Dispatch ──────────────────────────────────────────────────

    def dispatch(self, msg: LogMessage) -> None:
        """
        Buffer, filter, fan out, and republish if the message is ours.

        Messages are buffered whether or not their namespace is enabled so a
        later pipe(flush=True) can show them under a relaxed filter.
        Messages that arrived by snooping are never republished.
        """
        if not isinstance(msg, LogMessage):
            raise TypeError("Invalid message")
        if not isinstance(msg.args, (tuple, list)):
            raise TypeError("Invalid message arguments")

        with self._lock:
            self._history.push(msg)
            if self._filter.is_enabled(msg.ns):
                self._fan_out(msg)

        # outside the lock: a snooping controller's dispatch takes its own
        if msg.owner_id == self.id:
            self._bus.publish(msg)

    def _fan_out(self, msg: LogMessage) -> None:
        """Write to every sink. Must hold self._lock."""
        if not self.isolate_sink_errors:
            for sink, meta in list(self._sinks.values()):
                self._write(sink, meta, msg)
            return

        errors: list[Exception] = []
        for sink, meta in list(self._sinks.values()):
            try:
                self._write(sink, meta, msg)
            except Exception as err:
                errors.append(err)
        if errors:
            raise errors[0]

    def _write(self, sink: Any, meta: SinkMeta, msg: LogMessage) -> None:
        if getattr(sink, "object_mode", False):
            sink.write(msg)
            return
        text = self.render(
            msg,
            format=meta.format,
            elements=meta.elements,
            colors=self._resolve_colors(sink, meta),
        )
        sink.write(f"{text}\n")

    def _resolve_colors(self, sink: Any, meta: SinkMeta) -> bool:
        if meta.colors is not None:
            return meta.colors
        if self._colors is not None:
            return self._colors
        isatty = getattr(sink, "isatty", None)
        if callable(isatty):
            return bool(isatty())
        return True

    def render(
        self,
        msg: LogMessage,
        *,
        format: Optional[LogFormatter] = None,
        elements: Optional[Mapping[str, Callable[..., str]]] = None,
        colors: Optional[bool] = None,
    ) -> str:
        """
        Render a message to text. Each option falls back to the controller
        setting, then to the built-in default.
        """
        formatter = format or self._format or default_formatter
        if colors is None:
            colors = self._colors if self._colors is not None else True
        merged = {**DEFAULT_ELEMENTS, **self._elements, **(elements or {})}

        view = RenderMessage(
            args=tuple(msg.args),
            method=msg.method,
            ns=msg.ns,
            colors=colors,
            elements=MappingProxyType(merged),
            ts=msg.ts,
            uptime=msg.uptime,
        )
        return formatter(view, self._styles[bool(colors)])

    # ── Snooping ──────────────────────────────────────────────────

    @property
    def bus(self) -> SnoopBus:
        return self._bus

    @property
    def snooping(self) -> bool:
        return self._snoop_token is not None

    def snoop(self, prefix: str | None = None) -> "SnoopLogg":
        """
        Relay every other controller's messages through this one.
        prefix, if given, is prepended to each relayed namespace as-is.
        """
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError("Expected namespace prefix to be a string")

        def on_snoop(msg: LogMessage) -> None:
            if isinstance(msg, LogMessage):
                if msg.owner_id == self.id:
                    return
                if prefix:
                    msg = msg.with_namespace(f"{prefix}{msg.ns or ''}")
            self.dispatch(msg)

        with self._lock:
            self.unsnoop()
            self._snoop_token = self._bus.subscribe(on_snoop)
        return self

    def unsnoop(self) -> "SnoopLogg":
        with self._lock:
            token, self._snoop_token = self._snoop_token, None
            if token is not None:
                self._bus.unsubscribe(token)
        return self

    # ── Status & lifecycle ────────────────────────────────────────

    def status(self) -> dict:
        """Current controller state for display."""
        with self._lock:
            return {
                "id": self.id,
                "filter": self._filter.describe(),
                "history": {
                    "size": len(self._history),
                    "max_size": self._history.max_size,
                },
                "colors": self._colors,
                "custom_format": self._format is not None,
                "custom_elements": sorted(self._elements),
                "levels": {
                    name: {"styles": list(level.styles), "label": level.label}
                    for name, level in self._levels.items()
                },
                "sinks": [
                    {
                        "type": type(sink).__name__,
                        "name": getattr(sink, "name", None),
                        "object_mode": bool(getattr(sink, "object_mode", False)),
                        "format": meta.format is not None,
                        "elements": sorted(meta.elements or {}),
                        "colors": meta.colors,
                    }
                    for sink, meta in self._sinks.values()
                ],
                "snooping": self._snoop_token is not None,
                "isolate_sink_errors": self.isolate_sink_errors,
            }

    def destroy(self) -> None:
        """Stop snooping, detach every sink and clear the history."""
        self.unsnoop()
        for sink in self.sinks:
            self.unpipe(sink)
        with self._lock:
            self._history.clear()

    def __repr__(self) -> str:
        return f"SnoopLogg(id={self.id!r}, sinks={len(self._sinks)})"


# ── Validation helpers ────────────────────────────────────────────────

def _check_sink(sink: Any) -> None:
    if sink is None or not callable(getattr(sink, "write", None)):
        raise TypeError("Invalid sink")


def _check_format(fmt: Any) -> Optional[LogFormatter]:
    if fmt is not None and not callable(fmt):
        raise TypeError("Expected format to be a function")
    return fmt


def _check_elements(elements: Any) -> Optional[dict[str, Callable[..., str]]]:
    if elements is None:
        return None
    if not isinstance(elements, Mapping):
        raise TypeError("Expected elements to be a mapping")
    for name, fn in elements.items():
        if name in ELEMENT_NAMES and not callable(fn):
            raise TypeError(f'Expected "{name}" element to be a function')
    return dict(elements)


def _check_colors(colors: Any) -> Optional[bool]:
    if colors is not None and not isinstance(colors, bool):
        raise TypeError("Expected colors to be a boolean")
    return colors
