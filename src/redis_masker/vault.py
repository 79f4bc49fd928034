"""Token store: Redis-backed mapping between original and masked values.

Design goals:
  - Cache first: a stored mapping is returned without calling the synthesizer
  - Deterministic fallback: a miss is recomputed from the digest, so eviction
    or failed writes never change the output
  - Honest failures: a Redis error on read is raised, never treated as a miss

Keys:
  mask:<category>:<original>    → masked value
  unmask:<category>:<masked>    → original value (best effort)
"""

from __future__ import annotations
import logging
import time
from collections.abc import Callable

import redis

from .exceptions import ConfigError, TokenStoreConnectionError, TokenStoreError
from .types import MaskingSettings

logger = logging.getLogger(__name__)

_FORWARD_FMT = "mask:{category}:{value}"
_REVERSE_FMT = "unmask:{category}:{value}"

DEFAULT_PORT = 6379


def forward_key(category: str, original: str) -> str:
    return _FORWARD_FMT.format(category=category, value=original)


def reverse_key(category: str, masked: str) -> str:
    return _REVERSE_FMT.format(category=category, value=masked)


def split_addr(addr: str) -> tuple[str, int]:
    """Split ``host:port`` (port optional) into its parts."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        return addr, DEFAULT_PORT
    if not host:
        raise ConfigError(f"redis_addr '{addr}' has no host")
    try:
        return host, int(port)
    except ValueError as e:
        raise ConfigError(f"redis_addr '{addr}' has an invalid port") from e


class TokenStore:
    """Get-or-create masked values on top of a Redis client.

    The client must be safe for concurrent use; ``redis.Redis`` pools its
    connections, so one store can be shared by worker threads.
    """

    __slots__ = ("_client", "_ttl", "_synthesize", "addr")

    def __init__(
        self,
        client: redis.Redis,
        synthesizer: Callable[[str, str], str],
        *,
        ttl: int = 0,
        addr: str = "",
    ) -> None:
        if ttl < 0:
            raise ConfigError("token_ttl must be non-negative")
        self._client = client
        self._synthesize = synthesizer
        self._ttl = ttl
        self.addr = addr

    @classmethod
    def connect(
        cls,
        settings: MaskingSettings,
        synthesizer: Callable[[str, str], str],
    ) -> "TokenStore":
        """Build a store with a new client.  Does not contact Redis."""
        host, port = split_addr(settings.redis_addr)
        client = redis.Redis(
            host=host,
            port=port,
            password=settings.redis_password or None,
            db=settings.redis_db,
            socket_timeout=settings.socket_timeout,
            socket_connect_timeout=settings.socket_timeout,
            decode_responses=True,
        )
        return cls(client, synthesizer, ttl=settings.token_ttl, addr=settings.redis_addr)

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    def get_or_create(
        self,
        original: str,
        category: str,
        *,
        deadline: float | None = None,
    ) -> str:
        """Return the cached masked value, or synthesize and store a new one.

        Args:
            original: Value to mask.
            category: Pattern name or ``attribute_<field>``.
            deadline: Optional ``time.monotonic()`` deadline for the call.

        Raises:
            TokenStoreError: the read failed or the deadline had passed.
        """
        key = forward_key(category, original)

        _check_deadline(deadline, category)
        try:
            cached = self._client.get(key)
        except redis.RedisError as e:
            raise TokenStoreError(category, f"redis get error: {e}") from e
        if cached is not None:
            return cached

        masked = self._synthesize(original, category)

        # Writes are best effort; the synthesized value is repeatable anyway
        ex = self._ttl or None
        try:
            _check_deadline(deadline, category)
            self._client.set(key, masked, ex=ex)
        except (redis.RedisError, TokenStoreError) as e:
            logger.warning("Failed to store masked value (category=%s): %s", category, e)

        try:
            _check_deadline(deadline, category)
            self._client.set(reverse_key(category, masked), original, ex=ex)
        except (redis.RedisError, TokenStoreError) as e:
            logger.debug("Failed to store reverse mapping (category=%s): %s", category, e)

        return masked

    def lookup_original(self, masked: str, category: str) -> str | None:
        """Best-effort reverse lookup.  None if unknown or expired."""
        try:
            return self._client.get(reverse_key(category, masked))
        except redis.RedisError as e:
            raise TokenStoreError(category, f"redis get error: {e}") from e

    def lookup_masked(self, original: str, category: str) -> str | None:
        """Cached masked value for an original, without creating one."""
        try:
            return self._client.get(forward_key(category, original))
        except redis.RedisError as e:
            raise TokenStoreError(category, f"redis get error: {e}") from e

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def ttl(self) -> int:
        return self._ttl

    def ping(self) -> None:
        """Health check.  Raises TokenStoreConnectionError if Redis is down."""
        try:
            self._client.ping()
        except redis.RedisError as e:
            raise TokenStoreConnectionError(self.addr, str(e)) from e

    def close(self) -> None:
        self._client.close()


def _check_deadline(deadline: float | None, category: str) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise TokenStoreError(category, "deadline exceeded")
