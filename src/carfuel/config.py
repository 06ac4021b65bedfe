"""Runtime configuration for carfuel."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

from carfuel._constants import BASE_URL, DEFAULT_HOST, DEFAULT_PORT
from carfuel.exceptions import CarFuelConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value)
    except ValueError as exc:
        raise CarFuelConfigError(f"{env_key} must be a {kind.__name__}, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class CarFuelConfig:
    """Server and client configuration.

    Parameters
    ----------
    host : str
        Interface the HTTP server binds to.
    port : int
        Port the HTTP server listens on.
    base_url : str
        Root URL the CLI client talks to.
    request_timeout : float
        Total client request timeout in seconds.
    log_level : str
        Logging level name used when ``--verbose`` is not given.
    access_log : bool
        Enable the aiohttp access log on the server.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    base_url: str = BASE_URL
    request_timeout: float = 10.0
    log_level: str = "WARNING"
    access_log: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise CarFuelConfigError(f"port must be between 1 and 65535, got {self.port}")
        if self.request_timeout <= 0:
            raise CarFuelConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise CarFuelConfigError(f"unknown log level {self.log_level!r}")

    @classmethod
    def from_env(cls, **overrides: Any) -> CarFuelConfig:
        """Create configuration from ``CARFUEL_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CARFUEL_HOST": "host",
            "CARFUEL_BASE_URL": "base_url",
            "CARFUEL_LOG_LEVEL": "log_level",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        port_env = env.get("CARFUEL_PORT")
        if port_env is not None and "port" not in overrides:
            config_kwargs["port"] = _env_number("CARFUEL_PORT", port_env, int)

        timeout_env = env.get("CARFUEL_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_number("CARFUEL_REQUEST_TIMEOUT", timeout_env, float)

        if "access_log" not in overrides:
            config_kwargs["access_log"] = _env_bool(env.get("CARFUEL_ACCESS_LOG"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
