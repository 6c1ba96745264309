"""
Log messages and level definitions.

A LogMessage is what a level call produces and what the controller buffers,
relays and hands to object-mode sinks. A RenderMessage is the view a
formatter sees: the raw fields plus the resolved colors flag and element
table.
"""

import re
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Mapping


# Reference point for uptime. Taken at import, which for all practical
# purposes is process start for anything that logs.
_START = time.monotonic()

_INVALID_NAME_RE = re.compile(r"[\s,|]")


def uptime() -> float:
    """Seconds since the logging core was loaded."""
    return time.monotonic() - _START


def validate_name(name: Any, what: str = "namespace") -> str:
    """Check a namespace segment or level name. Returns it unchanged."""
    if not isinstance(name, str):
        raise TypeError(f"Expected {what} to be a string")
    if not name:
        raise ValueError(f"Expected {what} to be a non-empty string")
    if _INVALID_NAME_RE.search(name):
        raise ValueError(
            f"{what.capitalize()} cannot contain spaces, commas, or pipe characters"
        )
    return name


@dataclass(frozen=True)
class Level:
    """
    One entry of a controller's level table.

    styles: StyleHelpers style names applied to the rendered label.
    label:  False suppresses the label entirely ("log").
    """
    name: str
    styles: tuple[str, ...] = ()
    label: bool = True


DEFAULT_LEVELS: Mapping[str, Level] = MappingProxyType({
    "log": Level("log", label=False),
    "trace": Level("trace", ("gray",)),
    "debug": Level("debug", ("magenta",)),
    "info": Level("info", ("green",)),
    "warn": Level("warn", ("yellow",)),
    "error": Level("error", ("red_bright",)),
    "panic": Level("panic", ("bg_red", "white")),
})


@dataclass(frozen=True)
class LogMessage:
    """
    Immutable raw log message.

    owner_id is the id of the controller whose logger emitted it; a
    controller only republishes messages carrying its own id.
    """
    owner_id: str
    ns: str
    method: str
    args: tuple[Any, ...]
    ts: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    uptime: float = field(default_factory=uptime)

    @classmethod
    def create(cls, owner_id: str, ns: str, method: str, args: tuple) -> "LogMessage":
        """Factory stamping the current time and uptime."""
        return cls(
            owner_id=owner_id,
            ns=ns,
            method=method,
            args=tuple(args),
            ts=datetime.now(timezone.utc),
            uptime=uptime(),
        )

    def with_namespace(self, ns: str) -> "LogMessage":
        """Copy with a rewritten namespace (snoop prefixing)."""
        return replace(self, ns=ns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "ns": self.ns,
            "method": self.method,
            "args": list(self.args),
            "ts": self.ts.isoformat(),
            "uptime": self.uptime,
        }


@dataclass(frozen=True)
class RenderMessage:
    """What a formatter receives alongside the StyleHelpers."""
    args: tuple[Any, ...]
    method: str
    ns: str
    colors: bool
    elements: Mapping[str, Callable[..., str]]
    ts: datetime
    uptime: float
