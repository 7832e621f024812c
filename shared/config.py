"""
Configuration for the client and the echo server.

Values are resolved in this order, later ones winning:
built-in defaults, YAML file, environment variables, explicit overrides
(CLI options).

    client:
      endpoint: ws://localhost:8080/
      interval: 1.0
      max_messages: 3
      max_size: 1048576
      open_timeout: 10.0
    server:
      host: 0.0.0.0
      port: 8080
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from shared.errors import ConfigError
from shared.log import get_logger
from shared.utils import is_port, is_ws_url

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "ws://localhost:8080/"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_INTERVAL = 1.0
DEFAULT_MAX_SIZE = 2 ** 20  # 1 MiB, same as websockets

ENV_SERVER = "WSCOUNT_SERVER"
ENV_HOST = "WSCOUNT_HOST"
ENV_PORT = "WSCOUNT_PORT"


@dataclass
class ClientConfig:
    endpoint: str = DEFAULT_ENDPOINT
    interval: float = DEFAULT_INTERVAL
    max_messages: Optional[int] = None
    max_size: Optional[int] = DEFAULT_MAX_SIZE
    open_timeout: float = 10.0

    def validate(self) -> "ClientConfig":
        if not is_ws_url(self.endpoint):
            raise ConfigError(f"Invalid endpoint address: {self.endpoint!r}")
        if not isinstance(self.interval, (int, float)) or self.interval <= 0:
            raise ConfigError(f"interval must be a positive number, got {self.interval!r}")
        if self.max_messages is not None and (not isinstance(self.max_messages, int) or self.max_messages < 1):
            raise ConfigError(f"max_messages must be a positive integer, got {self.max_messages!r}")
        if self.max_size is not None and (not isinstance(self.max_size, int) or self.max_size < 1):
            raise ConfigError(f"max_size must be a positive integer, got {self.max_size!r}")
        if not isinstance(self.open_timeout, (int, float)) or self.open_timeout <= 0:
            raise ConfigError(f"open_timeout must be a positive number, got {self.open_timeout!r}")
        return self


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    max_size: Optional[int] = DEFAULT_MAX_SIZE

    def validate(self) -> "ServerConfig":
        if not isinstance(self.host, str) or not self.host:
            raise ConfigError(f"Invalid host: {self.host!r}")
        if not is_port(self.port):
            raise ConfigError(f"Invalid port: {self.port!r}")
        return self


@dataclass
class AppConfig:
    client: ClientConfig = field(default_factory=ClientConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(
    path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """Load defaults, then the YAML file (if any), then the environment"""
    env = os.environ if environ is None else environ
    data = _read_yaml(path) if path is not None else {}

    client = _apply(ClientConfig(), data.get("client"), "client")
    server = _apply(ServerConfig(), data.get("server"), "server")

    if env.get(ENV_SERVER):
        client = replace(client, endpoint=env[ENV_SERVER])
    if env.get(ENV_HOST):
        server = replace(server, host=env[ENV_HOST])
    if env.get(ENV_PORT):
        try:
            server = replace(server, port=int(env[ENV_PORT]))
        except ValueError:
            raise ConfigError(f"{ENV_PORT} must be an integer, got {env[ENV_PORT]!r}")

    return AppConfig(client=client.validate(), server=server.validate())


def with_overrides(config: Any, **overrides: Any) -> Any:
    """Return a validated copy with every non-None override applied"""
    values = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **values).validate()


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    logger.debug("Loaded config from %s", path)
    return data


def _apply(config: Any, section: Any, name: str) -> Any:
    if section is None:
        return config
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    known = {f.name for f in fields(config)}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}' section: {sorted(unknown)}")
    return replace(config, **section)
