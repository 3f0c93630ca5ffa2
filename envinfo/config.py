from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_BASE_PATH = "/nodejs"
DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    base_path: str = DEFAULT_BASE_PATH
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def socket_path(self) -> str:
        return f"{self.base_path}/socket.io"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            base_path=_base_path(env.get("BASE_PATH")),
            port=_port(env.get("PORT")),
            host=env.get("HOST") or DEFAULT_HOST,
            log_level=(env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )


def _base_path(raw: Optional[str]) -> str:
    # Empty means "not set", same as an unset variable
    if not raw:
        return DEFAULT_BASE_PATH
    path = raw.rstrip("/")
    if path and not path.startswith("/"):
        path = "/" + path
    return path


def _port(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"PORT must be between 1 and 65535, got {port}")
    return port
