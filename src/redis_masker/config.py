"""YAML/dict config loader for redis-masker.

Supports loading from a YAML file or a plain dict (for embedding
in a larger pipeline config).

Example YAML:

    redis_masking:
      enabled: true
      redis_addr: localhost:6379
      redis_password: ""
      redis_db: 0
      token_ttl: 86400           # seconds, 0 = never expire
      socket_timeout: 2.0
      fields_to_mask:
        - username
        - client_ip
      patterns:
        - name: ipv4
          regex: '\\b(?:\\d{1,3}\\.){3}\\d{1,3}\\b'
          masked_prefix: IP-
        - name: email
          regex: '[\\w.+-]+@[\\w-]+\\.[\\w.]+'
          masked_prefix: EMAIL-

Omitting ``patterns`` selects the stock ipv4/hostname patterns; an explicit
empty list disables body scanning.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .patterns import DEFAULT_PATTERNS
from .processor import MaskingProcessor
from .types import MaskingSettings, PatternConfig, Record
from .vault import split_addr

DEFAULT_REDIS_ADDR = "localhost:6379"


class _NoopProcessor:
    """Pass-through processor when masking is disabled."""
    def __init__(self, settings: MaskingSettings) -> None:
        self.settings = settings
    def start(self) -> None:
        pass
    def shutdown(self) -> None:
        pass
    def __enter__(self) -> "_NoopProcessor":
        return self
    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False
    def mask_record(self, record: Record, *, deadline: float | None = None) -> Record:
        return record
    def process(self, records, *, deadline: float | None = None) -> list[Record]:
        return list(records)
    def mask_text(self, text: str, *, deadline: float | None = None) -> str:
        return text
    def unmask(self, masked: str, category: str) -> str | None:
        return None


def _load_patterns(raw: Any) -> list[PatternConfig]:
    if raw is None:
        return list(DEFAULT_PATTERNS)
    if not isinstance(raw, list):
        raise ConfigError("patterns must be a list")
    patterns: list[PatternConfig] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigError(f"patterns[{i}] must be a mapping")
        name = item.get("name")
        regex = item.get("regex")
        if not name:
            raise ConfigError(f"patterns[{i}] is missing 'name'")
        if not regex:
            raise ConfigError(f"pattern '{name}' is missing 'regex'")
        patterns.append(PatternConfig(
            name=str(name),
            regex=str(regex),
            masked_prefix=str(item.get("masked_prefix") or ""),
        ))
    return patterns


def _as_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer") from e


def _unwrap(data: Any, source: str = "config") -> dict[str, Any]:
    """Accept a flat mapping or one nested under ``redis_masking``."""
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: top level must be a mapping")
    if "redis_masking" in data:
        data = data["redis_masking"] or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: redis_masking must be a mapping")
    return data


def load_config(data: dict[str, Any]) -> MaskingSettings:
    """Normalize and validate a config dict (from YAML or inline)."""
    data = _unwrap(data)

    token_ttl = _as_int(data, "token_ttl", 0)
    if token_ttl < 0:
        raise ConfigError("token_ttl must be non-negative")

    redis_db = _as_int(data, "redis_db", 0)
    if redis_db < 0:
        raise ConfigError("redis_db must be non-negative")

    redis_addr = data.get("redis_addr") or DEFAULT_REDIS_ADDR
    split_addr(redis_addr)

    socket_timeout = data.get("socket_timeout")
    if socket_timeout is not None:
        try:
            socket_timeout = float(socket_timeout)
        except (TypeError, ValueError) as e:
            raise ConfigError("socket_timeout must be a number") from e
        if socket_timeout <= 0:
            raise ConfigError("socket_timeout must be positive")

    fields = data.get("fields_to_mask") or []
    if isinstance(fields, str):
        fields = [fields]

    return MaskingSettings(
        enabled=bool(data.get("enabled", True)),
        redis_addr=redis_addr,
        redis_password=data.get("redis_password") or "",
        redis_db=redis_db,
        token_ttl=token_ttl,
        socket_timeout=socket_timeout,
        fields_to_mask=[str(f) for f in fields],
        patterns=_load_patterns(data.get("patterns")),
    )


def read_yaml(path: str | Path) -> dict[str, Any]:
    """Read a YAML config file into a flat dict (unwrapping ``redis_masking``)."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return _unwrap(data, str(path))


def load_from_yaml(path: str | Path) -> MaskingSettings:
    """Load config from a YAML file."""
    return load_config(read_yaml(path))


def create_processor(
    config: dict[str, Any] | MaskingSettings,
) -> MaskingProcessor | _NoopProcessor:
    """Create a processor from a config dict or loaded settings.

    The processor is not started; use it as a context manager.  When
    masking is disabled the result is a pass-through with no ``engine``,
    ``store`` or ``matcher``.
    """
    settings = config if isinstance(config, MaskingSettings) else load_config(config)

    if not settings.enabled:
        # Return a pass-through processor (no masking, no connection)
        return _NoopProcessor(settings)

    return MaskingProcessor(settings)
