"""Configuration management for the GraphQL client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_TIMEOUT = 30.0


class ConfigurationError(ValueError):
    """Raised when client configuration is missing or invalid."""


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for a GraphQL endpoint."""

    endpoint: str
    token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    verify: bool = True
    headers: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ClientConfig":
        """Create a :class:`ClientConfig` from raw dictionary data."""
        endpoint = str(data.get("endpoint") or "").strip()
        if not endpoint:
            raise ConfigurationError("Missing required client configuration field: endpoint")
        if not endpoint.startswith(("http://", "https://")):
            raise ConfigurationError("endpoint must be an http:// or https:// URL")

        raw_timeout = data.get("timeout", DEFAULT_TIMEOUT)
        try:
            timeout = float(raw_timeout)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("timeout must be a number of seconds") from exc
        if timeout <= 0:
            raise ConfigurationError("timeout must be greater than zero")

        raw_headers = data.get("headers") or {}
        if not isinstance(raw_headers, Mapping):
            raise ConfigurationError("headers must be a mapping of header names to values")

        token = str(data.get("token") or "").strip()
        return ClientConfig(
            endpoint=endpoint,
            token=token or None,
            timeout=timeout,
            verify=_parse_bool("verify", data.get("verify", True)),
            headers={str(key): str(value) for key, value in raw_headers.items()},
        )


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false")


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    endpoint = environ.get("USERGQL_ENDPOINT", "").strip()
    if endpoint:
        overrides["endpoint"] = endpoint
    token = environ.get("USERGQL_TOKEN", "").strip()
    if token:
        overrides["token"] = token
    timeout = environ.get("USERGQL_TIMEOUT", "").strip()
    if timeout:
        overrides["timeout"] = timeout
    return overrides


def load_client_config(
    config_path: Path | None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Load client settings from a YAML file, then apply environment overrides.

    The file may be absent as long as ``USERGQL_ENDPOINT`` supplies the endpoint.
    """
    env = os.environ if environ is None else environ

    raw: Dict[str, object] = {}
    if config_path is not None and config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                document = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Configuration file is not valid YAML: {exc}") from exc
        if not isinstance(document, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        section = document.get("graphql")
        if section is None:
            raise ConfigurationError("Configuration file must define a 'graphql' section")
        if not isinstance(section, dict):
            raise ConfigurationError("The 'graphql' section must be a mapping")
        raw.update(section)

    raw.update(_environment_overrides(env))
    return ClientConfig.from_dict(raw)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "client.yaml").resolve(strict=False)
    return candidate


__all__ = [
    "ClientConfig",
    "ConfigurationError",
    "DEFAULT_TIMEOUT",
    "load_client_config",
    "resolve_config_path",
]
