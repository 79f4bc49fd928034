"""Shared fixtures: an in-memory stand-in for a Redis server."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import logging

import pytest
import redis

from redis_masker import MaskingEngine, PatternMatcher, TokenStore, ValueSynthesizer
from redis_masker.patterns import DEFAULT_PATTERNS


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Just enough of redis.Redis for the token store: get/set/ping/close.

    ``fail_get``/``fail_set`` are key substrings that make the call raise
    a ConnectionError; ``"*"`` matches every key.
    """

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._data: dict[str, str] = {}
        self._expires: dict[str, float] = {}
        self.fail_get: set[str] = set()
        self.fail_set: set[str] = set()
        self.fail_ping = False
        self.closed = False
        self.calls: list[tuple[str, str]] = []

    def _should_fail(self, patterns: set[str], key: str) -> bool:
        return any(p == "*" or p in key for p in patterns)

    def _expire(self, key: str) -> None:
        deadline = self._expires.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._data.pop(key, None)
            self._expires.pop(key, None)

    def get(self, key):
        self.calls.append(("get", key))
        if self._should_fail(self.fail_get, key):
            raise redis.exceptions.ConnectionError("connection refused")
        self._expire(key)
        return self._data.get(key)

    def set(self, key, value, ex=None):
        self.calls.append(("set", key))
        if self._should_fail(self.fail_set, key):
            raise redis.exceptions.ConnectionError("connection refused")
        self._data[key] = value
        if ex:
            self._expires[key] = self._clock() + ex
        else:
            self._expires.pop(key, None)
        return True

    def ping(self):
        if self.fail_ping:
            raise redis.exceptions.ConnectionError("connection refused")
        return True

    def close(self):
        self.closed = True

    def ttl_of(self, key: str) -> float | None:
        deadline = self._expires.get(key)
        return None if deadline is None else deadline - self._clock()


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """setup_logging() detaches the package logger from caplog; undo it."""
    yield
    logger = logging.getLogger("redis_masker")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def matcher():
    return PatternMatcher(DEFAULT_PATTERNS)


@pytest.fixture
def make_store(matcher):
    """Build a TokenStore over a given fake client."""
    def _make(client, *, ttl=0, synthesizer=None):
        return TokenStore(client, synthesizer or ValueSynthesizer(matcher.prefixes), ttl=ttl)
    return _make


@pytest.fixture
def store(fake_redis, make_store):
    return make_store(fake_redis)


@pytest.fixture
def engine(store, matcher):
    return MaskingEngine(store, matcher)


@pytest.fixture
def patch_redis(monkeypatch, fake_redis):
    """Make redis.Redis(...) return the shared fake; records constructor kwargs."""
    created: list[dict] = []

    def _factory(**kwargs):
        created.append(kwargs)
        return fake_redis

    monkeypatch.setattr(redis, "Redis", _factory)
    return created
