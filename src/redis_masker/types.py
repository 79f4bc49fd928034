"""Core types."""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any


ATTRIBUTE_MARKER = "attribute_"


@dataclass(frozen=True, slots=True)
class PatternConfig:
    """A detection pattern as it appears in configuration."""
    name: str              # e.g. "ipv4", "hostname"
    regex: str
    masked_prefix: str = ""  # e.g. "IP-", "HOST-"


@dataclass(frozen=True, slots=True)
class Pattern:
    """A compiled detection pattern."""
    name: str
    regex: re.Pattern
    masked_prefix: str = ""


@dataclass(slots=True)
class MaskingSettings:
    """Validated settings for a masking processor."""
    enabled: bool = True
    redis_addr: str = "localhost:6379"
    redis_password: str = ""
    redis_db: int = 0
    token_ttl: int = 0                          # seconds, 0 = no expiration
    socket_timeout: float | None = None
    fields_to_mask: list[str] = field(default_factory=list)
    patterns: list[PatternConfig] = field(default_factory=list)


def attribute_category(field_name: str) -> str:
    """Category used for a masked record attribute."""
    return ATTRIBUTE_MARKER + field_name


# A record as walked by the processor: {"attributes": {...}, "body": ...}
Record = dict[str, Any]
