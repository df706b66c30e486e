"""Configuration management for the user record service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import DEFAULT_TIMEOUT, resolve_database_path
from .security import DEFAULT_BCRYPT_ROUNDS

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"

# Environment variable -> configuration field.
_ENV_FIELDS = {
    "HOST": "host",
    "PORT": "port",
    "USERS_DB_PATH": "database_path",
    "USERS_DB_TIMEOUT": "database_timeout",
    "USERS_BCRYPT_ROUNDS": "bcrypt_rounds",
    "LOG_LEVEL": "log_level",
}


def _parse_port(value: object) -> int:
    try:
        port = int(str(value))
    except ValueError as exc:
        raise ValueError(f"Invalid port: {value!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_positive_float(name: str, value: object) -> float:
    try:
        parsed = float(str(value))
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive")
    return parsed


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings for the HTTP service and its store."""

    database_path: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    database_timeout: float = DEFAULT_TIMEOUT
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data.

        Relative database paths are resolved against ``base_path`` when given.
        """
        unknown = set(data) - {
            "host",
            "port",
            "database_path",
            "database_timeout",
            "bcrypt_rounds",
            "log_level",
        }
        if unknown:
            raise ValueError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

        raw_path = data.get("database_path")
        if raw_path:
            candidate = Path(str(raw_path)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        return ServiceConfig(
            database_path=database_path,
            host=str(data.get("host") or DEFAULT_HOST),
            port=_parse_port(data.get("port", DEFAULT_PORT)),
            database_timeout=_parse_positive_float(
                "database_timeout", data.get("database_timeout", DEFAULT_TIMEOUT)
            ),
            bcrypt_rounds=int(str(data.get("bcrypt_rounds", DEFAULT_BCRYPT_ROUNDS))),
            log_level=str(data.get("log_level") or DEFAULT_LOG_LEVEL).upper(),
        )

    def with_overrides(self, **overrides: object) -> "ServiceConfig":
        """Return a copy with every non-``None`` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        if "port" in changes:
            changes["port"] = _parse_port(changes["port"])
        return replace(self, **changes)  # type: ignore[arg-type]


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (Path(__file__).resolve().parent.parent / "config" / "service.yaml").resolve(strict=False)


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load raw settings from a YAML file, returning ``{}`` if it does not exist."""
    if not config_path.exists():
        return {}
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    service = raw.get("service", raw)
    if not isinstance(service, dict):
        raise ValueError("The 'service' section must be a mapping")
    return dict(service)


def load_service_config(environ: Mapping[str, str] | None = None) -> ServiceConfig:
    """Build the configuration from defaults, the YAML file and the environment."""

    env = os.environ if environ is None else environ
    config_path = resolve_config_path(env.get("USERS_CONFIG"))
    data = load_config_file(config_path)

    for variable, field in _ENV_FIELDS.items():
        value = env.get(variable)
        if value is not None and value.strip():
            data[field] = value.strip()

    from_file = not (env.get("USERS_DB_PATH") or "").strip()
    base_path = config_path.parent if from_file else None
    return ServiceConfig.from_dict(data, base_path=base_path)


__all__ = [
    "DEFAULT_PORT",
    "ServiceConfig",
    "load_config_file",
    "load_service_config",
    "resolve_config_path",
]
