"""
Bridge from the standard library logging module.

Third-party code logs through `logging`; SnoopLoggHandler folds those
records into a controller's namespace tree so they are filtered, buffered,
rendered and snooped like everything else.

    handler = capture_logging(log, "urllib3", prefix="vendor")
    # urllib3.connectionpool WARNING → ns "vendor:urllib3:connectionpool", warn
    release_logging(handler, "urllib3")
"""

import logging
import re

from snooplogg.core import Logger, SnoopLogg

_INVALID = re.compile(r"[\s,|]")


def level_to_method(levelno: int) -> str:
    if levelno >= logging.CRITICAL:
        return "panic"
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    if levelno >= logging.DEBUG:
        return "debug"
    return "trace"


def _segments(name: str) -> list[str]:
    return [_INVALID.sub("_", part) or "_" for part in re.split(r"[.:]", name)]


class SnoopLoggHandler(logging.Handler):
    """
    logging.Handler that re-emits each record on the node named after the
    record's logger. Dots become namespace separators.
    """

    def __init__(self, controller: SnoopLogg, prefix: str | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.controller = controller
        self.prefix = prefix
        self._base: Logger = controller
        if prefix:
            for part in _segments(prefix):
                self._base = self._base.child(part)

    def node_for(self, logger_name: str) -> Logger:
        node = self._base
        for part in _segments(logger_name):
            node = node.child(part)
        return node

    def emit(self, record: logging.LogRecord) -> None:
        try:
            node = self.node_for(record.name)
            message = self.format(record) if self.formatter else record.getMessage()
            exc = record.exc_info[1] if record.exc_info else None
            if exc is not None:
                # the message is pre-formatted; keep its % signs literal
                node.emit(level_to_method(record.levelno), message.replace("%", "%%"), exc)
            else:
                node.emit(level_to_method(record.levelno), message)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def capture_logging(
    controller: SnoopLogg,
    logger_name: str | None = None,
    prefix: str | None = None,
    level: int = logging.NOTSET,
) -> SnoopLoggHandler:
    """Install a handler on logger_name (the root logger when None) and return it."""
    handler = SnoopLoggHandler(controller, prefix=prefix, level=level)
    logging.getLogger(logger_name).addHandler(handler)
    return handler


def release_logging(handler: SnoopLoggHandler, logger_name: str | None = None) -> None:
    logging.getLogger(logger_name).removeHandler(handler)
