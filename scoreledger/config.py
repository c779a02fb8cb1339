"""Listen address, store URI, limits."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from scoreledger.ledger.errors import ConfigError

SQLITE_PREFIX = "sqlite:///"
MEMORY_URI = "memory://"


@dataclass
class ServerConfig:
    # Versions
    server_version: str = "0.1.0"

    # Network
    host: str = "0.0.0.0"
    port: int = 4000
    cors_allow_all: bool = True
    cors_allowed_origins: list[str] = field(default_factory=list)

    # Store
    store_uri: str = ""
    store_timeout_sec: float = 10.0

    # Ranked view
    default_limit: int = 5
    max_limit: int = 100

    debug: bool = False

    @property
    def store_backend(self) -> str:
        if self.store_uri == MEMORY_URI:
            return "memory"
        return "sqlite"

    @property
    def sqlite_path(self) -> str:
        return self.store_uri[len(SQLITE_PREFIX):]

    def validate(self) -> None:
        if not self.store_uri:
            raise ConfigError("LEDGER_STORE_URI is not set")
        if self.store_uri != MEMORY_URI:
            if not self.store_uri.startswith(SQLITE_PREFIX) or not self.sqlite_path:
                raise ConfigError(f"unsupported store URI: {self.store_uri!r}")
        if self.store_timeout_sec <= 0:
            raise ConfigError("LEDGER_STORE_TIMEOUT must be positive")
        if not 0 < self.port < 65536:
            raise ConfigError(f"invalid port: {self.port}")
        if self.default_limit <= 0 or self.max_limit <= 0:
            raise ConfigError("limits must be positive")
        if self.default_limit > self.max_limit:
            raise ConfigError("LEDGER_DEFAULT_LIMIT exceeds LEDGER_MAX_LIMIT")

    @staticmethod
    def _parse_bool(v: str | None, default: bool) -> bool:
        if v is None:
            return default
        return v.strip().lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _parse_num(name: str, v: str | None, default, kind=int):
        if v is None or not v.strip():
            return default
        try:
            return kind(v)
        except ValueError:
            raise ConfigError(f"{name} must be a number, got {v!r}") from None

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, dotenv: bool = True) -> "ServerConfig":
        if env is None:
            if dotenv:
                load_dotenv(".env")
            env = dict(os.environ)

        cfg = cls()
        cfg.store_uri = env.get("LEDGER_STORE_URI", "").strip()
        cfg.store_timeout_sec = cls._parse_num("LEDGER_STORE_TIMEOUT", env.get("LEDGER_STORE_TIMEOUT"), cfg.store_timeout_sec, float)
        cfg.host = env.get("LEDGER_HOST", cfg.host)
        cfg.port = cls._parse_num("LEDGER_PORT", env.get("LEDGER_PORT"), cfg.port)
        cfg.cors_allow_all = cls._parse_bool(env.get("LEDGER_CORS_ALLOW_ALL"), cfg.cors_allow_all)
        origins = env.get("LEDGER_CORS_ORIGINS")
        if origins:
            cfg.cors_allowed_origins = [o.strip() for o in origins.split(",") if o.strip()]
        cfg.default_limit = cls._parse_num("LEDGER_DEFAULT_LIMIT", env.get("LEDGER_DEFAULT_LIMIT"), cfg.default_limit)
        cfg.max_limit = cls._parse_num("LEDGER_MAX_LIMIT", env.get("LEDGER_MAX_LIMIT"), cfg.max_limit)
        cfg.debug = cls._parse_bool(env.get("LEDGER_DEBUG"), cfg.debug)

        cfg.validate()
        return cfg
