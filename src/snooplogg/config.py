"""
Pydantic configuration schemas for SnoopLogg.

A controller can be described in YAML and built in one call:

    enable: "app,-app:noisy"
    history_size: 200
    snoop: "lib:"
    levels:
      audit: [bold, cyan]
    sinks:
      console:
        type: stream
        stream: stderr
      disk:
        type: file
        path: logs/app.log
        rotation: daily
        flush: true

Usage:
    config = SnoopLoggConfig.from_yaml("snooplogg.yaml")
    log = build_controller(config)

SnoopLoggConfig.from_env() gives the process defaults SnoopLogg.instance()
starts from.
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from snooplogg.bus import SnoopBus
from snooplogg.core import SnoopLogg
from snooplogg.records import validate_name
from snooplogg.sinks import FileSink, RecordSink, Sink, StreamSink
from snooplogg.styles import STYLE_NAMES

ENV_ENABLE = "SNOOPLOGG"
ENV_ENABLE_FALLBACK = "DEBUG"
ENV_HISTORY_SIZE = "SNOOPLOGG_MAX_BUFFER_SIZE"

_LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")


# ═══════════════════════════════════════════════════════════════════
#  Sink Config
# ═══════════════════════════════════════════════════════════════════

class SinkConfig(BaseModel):
    type: Literal["stream", "file", "record"] = "stream"
    stream: Literal["stderr", "stdout"] = "stderr"   # stream
    path: Optional[str] = None                       # file
    rotation: Literal["none", "daily"] = "none"      # file
    capacity: int = Field(1000, ge=0)                # record
    colors: Optional[bool] = None                    # stream, file
    flush: bool = False                              # replay history on attach

    @model_validator(mode="after")
    def validate_file_path(self) -> "SinkConfig":
        if self.type == "file" and not self.path:
            raise ValueError("File sink requires 'path'")
        return self


# ═══════════════════════════════════════════════════════════════════
#  Controller Config
# ═══════════════════════════════════════════════════════════════════

class SnoopLoggConfig(BaseModel):
    enable: Optional[str] = None
    history_size: int = Field(0, ge=0)
    colors: Optional[bool] = None
    snoop: bool | str | None = None
    isolate_sink_errors: bool = False
    levels: dict[str, list[str]] = Field(default_factory=dict)
    sinks: dict[str, SinkConfig] = Field(default_factory=dict)

    @field_validator("levels")
    @classmethod
    def validate_levels(cls, levels: dict[str, list[str]]) -> dict[str, list[str]]:
        for name, styles in levels.items():
            validate_name(name, "level name")
            unknown = [s for s in styles if s not in STYLE_NAMES]
            if unknown:
                raise ValueError(f"Level '{name}' has unknown style(s): {', '.join(unknown)}")
        return levels

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SnoopLoggConfig":
        """Load and validate from a YAML file."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml_string(raw)

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "SnoopLoggConfig":
        """Load and validate from a YAML string. An empty document is the default config."""
        data = yaml.safe_load(yaml_string)
        return cls.model_validate(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "SnoopLoggConfig":
        """Load and validate from a dict."""
        return cls.model_validate(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SnoopLoggConfig":
        """
        Process defaults: the enable spec from SNOOPLOGG (or DEBUG), the
        history size from SNOOPLOGG_MAX_BUFFER_SIZE, and one stderr sink.
        """
        env = os.environ if environ is None else environ
        spec = env.get(ENV_ENABLE) or env.get(ENV_ENABLE_FALLBACK) or None
        return cls(
            enable=spec,
            history_size=_parse_size(env.get(ENV_HISTORY_SIZE)),
            sinks={"stderr": SinkConfig(type="stream", stream="stderr")},
        )

    def to_dict(self, exclude_none: bool = True) -> dict:
        return self.model_dump(exclude_none=exclude_none)


def _parse_size(raw: str | None) -> int:
    """Leading integer, like parseInt: "12abc" → 12. No digits → 0, negative → 0."""
    if raw is None:
        return 0
    match = _LEADING_INT_RE.match(raw)
    if match is None:
        return 0
    return max(int(match.group()), 0)


# ═══════════════════════════════════════════════════════════════════
#  Builders
# ═══════════════════════════════════════════════════════════════════

def build_sink(name: str, cfg: SinkConfig) -> Sink:
    if cfg.type == "stream":
        stream = sys.stdout if cfg.stream == "stdout" else None
        return StreamSink(stream, name=name)
    if cfg.type == "file":
        return FileSink(cfg.path, rotation=cfg.rotation, name=name)
    if cfg.type == "record":
        return RecordSink(cfg.capacity, name=name)
    raise ValueError(f"Unknown sink type '{cfg.type}'")


def build_controller(cfg: SnoopLoggConfig, bus: SnoopBus | None = None) -> SnoopLogg:
    """Build a live controller: levels, options, filter, sinks, then snoop."""
    log = SnoopLogg(bus=bus, isolate_sink_errors=cfg.isolate_sink_errors)

    for name, styles in cfg.levels.items():
        log.add_level(name, styles)

    options: dict[str, Any] = {"history_size": cfg.history_size}
    if cfg.colors is not None:
        options["colors"] = cfg.colors
    log.config(options)
    log.enable(cfg.enable)

    for name, sink_cfg in cfg.sinks.items():
        log.pipe(build_sink(name, sink_cfg), flush=sink_cfg.flush, colors=sink_cfg.colors)

    if isinstance(cfg.snoop, str):
        log.snoop(cfg.snoop)
    elif cfg.snoop:
        log.snoop()
    return log
