"""Runtime settings read from environment variables."""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return int(value)


@dataclass
class Settings:
    """Server and session settings.

    Defaults: a 40 second turn clock, rooms
    swept after 30 idle minutes, sweeps every 5 minutes.
    """

    turn_time_limit: int = 40
    turn_tick_seconds: float = 1.0
    room_idle_seconds: float = 30 * 60
    sweep_interval_seconds: float = 5 * 60
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings, letting environment variables override defaults."""
        defaults = cls()
        return cls(
            turn_time_limit=_env_int("TURN_TIME_LIMIT", defaults.turn_time_limit),
            turn_tick_seconds=_env_float("TURN_TICK_SECONDS", defaults.turn_tick_seconds),
            room_idle_seconds=_env_float("ROOM_IDLE_SECONDS", defaults.room_idle_seconds),
            sweep_interval_seconds=_env_float(
                "SWEEP_INTERVAL_SECONDS", defaults.sweep_interval_seconds
            ),
            host=os.environ.get("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            log_level=os.environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )
