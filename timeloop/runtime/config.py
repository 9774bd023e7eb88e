"""Loop runtime configuration sourced from environment."""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_LOOP_DURATION_SECONDS = 120.0
DEFAULT_TIME_SCALE = 1.0
_MIN_LOOP_DURATION_SECONDS = 0.001


@dataclass(frozen=True, slots=True)
class LoopRuntimeConfig:
    """Immutable loop runtime configuration."""

    loop_duration_seconds: float = DEFAULT_LOOP_DURATION_SECONDS
    time_scale: float = DEFAULT_TIME_SCALE
    autostart: bool = False
    save_dir: str = "appdata/saves"
    log_format: str = "text"
    log_level: str = "INFO"
    log_file: str | None = None


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _flag(name: str, default: bool, *, env: Mapping[str, str] | None = None) -> bool:
    raw = _raw(name, env=env)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _float(
    name: str,
    default: float,
    *,
    minimum: float | None = None,
    env: Mapping[str, str] | None = None,
) -> float:
    raw = _raw(name, env=env)
    if raw is None:
        value = float(default)
    else:
        try:
            value = float(raw.strip())
        except ValueError:
            value = float(default)
        if not math.isfinite(value):
            value = float(default)
    if minimum is None:
        return value
    return max(float(minimum), value)


def _text(name: str, default: str, *, env: Mapping[str, str] | None = None) -> str:
    raw = _raw(name, env=env)
    if raw is None:
        return str(default)
    value = raw.strip()
    return value if value else str(default)


def load_loop_config(*, env: Mapping[str, str] | None = None) -> LoopRuntimeConfig:
    """Load loop configuration from env vars (or an explicit mapping)."""
    log_format = _text("TIMELOOP_LOG_FORMAT", _text("LOG_FORMAT", "text", env=env), env=env)
    log_level = _text("TIMELOOP_LOG_LEVEL", _text("LOG_LEVEL", "INFO", env=env), env=env)
    log_file = _text("TIMELOOP_LOG_FILE", "", env=env)
    return LoopRuntimeConfig(
        loop_duration_seconds=_float(
            "TIMELOOP_LOOP_DURATION",
            DEFAULT_LOOP_DURATION_SECONDS,
            minimum=_MIN_LOOP_DURATION_SECONDS,
            env=env,
        ),
        time_scale=_float("TIMELOOP_TIME_SCALE", DEFAULT_TIME_SCALE, minimum=0.0, env=env),
        autostart=_flag("TIMELOOP_AUTOSTART", False, env=env),
        save_dir=_text("TIMELOOP_SAVE_DIR", "appdata/saves", env=env),
        log_format=log_format.lower(),
        log_level=log_level.upper(),
        log_file=log_file or None,
    )
