"""
SnoopLogg: namespaced, snoopable logging.

A controller owns a tree of namespace loggers, a history buffer, an enable
filter and a set of sinks. Controllers can snoop on each other, so a library
can log into its own controller and an application can still see it.
"""

from snooplogg.core import Logger, SnoopLogg
from snooplogg.records import Level, LogMessage, RenderMessage, DEFAULT_LEVELS
from snooplogg.buffer import HistoryBuffer
from snooplogg.bus import SnoopBus
from snooplogg.filters import NamespaceFilter, compile_filter
from snooplogg.colors import RGB, ns_to_rgb, rgb_to_ansi256
from snooplogg.styles import Style, StyleHelpers, strip_ansi
from snooplogg.formatters import DEFAULT_ELEMENTS, default_formatter, format_args
from snooplogg.sinks import Sink, StreamSink, FileSink, RecordSink
from snooplogg.config import SinkConfig, SnoopLoggConfig, build_controller, build_sink
from snooplogg.capture import SnoopLoggHandler, capture_logging, release_logging

__all__ = [
    "Logger",
    "SnoopLogg",
    "Level",
    "LogMessage",
    "RenderMessage",
    "DEFAULT_LEVELS",
    "HistoryBuffer",
    "SnoopBus",
    "NamespaceFilter",
    "compile_filter",
    "RGB",
    "ns_to_rgb",
    "rgb_to_ansi256",
    "Style",
    "StyleHelpers",
    "strip_ansi",
    "DEFAULT_ELEMENTS",
    "default_formatter",
    "format_args",
    "Sink",
    "StreamSink",
    "FileSink",
    "RecordSink",
    "SinkConfig",
    "SnoopLoggConfig",
    "build_controller",
    "build_sink",
    "SnoopLoggHandler",
    "capture_logging",
    "release_logging",
]
