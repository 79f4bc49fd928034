"""Record processor: owns the Redis connection and walks batches of records.

Usage:

    settings = load_config({"fields_to_mask": ["username"]})
    with MaskingProcessor(settings) as proc:     # connects + health check
        masked = proc.process(records)
    # connection closed on every exit path

A record is a dict:

    {"attributes": {"username": "alice", "port": 22},
     "body": "login from 192.168.1.1"}

Attributes named in ``fields_to_mask`` are masked whole; a string body is
scanned with the configured patterns.  Records are modified in place.

Non-string attributes are masked by their text form: booleans as
``true``/``false``, everything else via ``str()``.  Floats therefore use
Python's repr (``1e+20``, ``0.1``), which other implementations may render
differently.
"""

from __future__ import annotations
import logging
from collections.abc import Iterable

from .exceptions import MaskingError, TokenStoreConnectionError
from .masker import MaskingEngine
from .patterns import PatternMatcher
from .synthesizer import ValueSynthesizer
from .types import MaskingSettings, Record
from .vault import TokenStore

logger = logging.getLogger(__name__)


def attribute_text(value: object) -> str:
    """Text form of an attribute value, as it is hashed and stored."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class MaskingProcessor:
    """Lifecycle and record traversal around a MaskingEngine."""

    def __init__(self, settings: MaskingSettings) -> None:
        self.settings = settings
        self._fields = frozenset(settings.fields_to_mask)
        # Compile first: a bad regex must fail before any connection exists
        self.matcher = PatternMatcher(settings.patterns)
        self._store: TokenStore | None = None
        self._engine: MaskingEngine | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Connect to Redis and verify it answers.  No-op if started."""
        if self._store is not None:
            return
        store = TokenStore.connect(self.settings, ValueSynthesizer(self.matcher.prefixes))
        try:
            store.ping()
        except TokenStoreConnectionError:
            store.close()
            raise
        logger.info("Connected to Redis successfully (addr=%s)", self.settings.redis_addr)
        self._store = store
        self._engine = MaskingEngine(store, self.matcher)

    def shutdown(self) -> None:
        if self._store is not None:
            self._store.close()
            logger.info("Closed Redis connection (addr=%s)", self.settings.redis_addr)
        self._store = None
        self._engine = None

    def __enter__(self) -> "MaskingProcessor":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.shutdown()
        return False

    @property
    def engine(self) -> MaskingEngine:
        if self._engine is None:
            raise RuntimeError("processor is not started")
        return self._engine

    @property
    def store(self) -> TokenStore:
        if self._store is None:
            raise RuntimeError("processor is not started")
        return self._store

    # ------------------------------------------------------------------
    # Record traversal
    # ------------------------------------------------------------------

    def mask_record(self, record: Record, *, deadline: float | None = None) -> Record:
        """Mask listed attributes and the body of one record, in place."""
        engine = self.engine
        attributes = record.get("attributes")
        if isinstance(attributes, dict):
            for key, value in attributes.items():
                if key in self._fields and value is not None:
                    text = attribute_text(value)
                    masked = engine.mask_field(text, key, deadline=deadline)
                    # Unchanged text means masking failed: keep the original object
                    if masked != text:
                        attributes[key] = masked

        body = record.get("body")
        if isinstance(body, str):
            masked_body = engine.mask_body(body, deadline=deadline)
            if masked_body != body:
                record["body"] = masked_body
        return record

    def process(
        self,
        records: Iterable[Record],
        *,
        deadline: float | None = None,
    ) -> list[Record]:
        """Mask a batch.  Every record comes back, masked or not."""
        out: list[Record] = []
        for record in records:
            try:
                self.mask_record(record, deadline=deadline)
            except MaskingError as e:
                logger.error("Failed to mask log record: %s", e)
            out.append(record)
        return out

    def mask_text(self, text: str, *, deadline: float | None = None) -> str:
        """Pattern-mask a single string (convenience)."""
        return self.engine.mask_body(text, deadline=deadline)

    def unmask(self, masked: str, category: str) -> str | None:
        """Best-effort reverse lookup of a masked value."""
        return self.store.lookup_original(masked, category)
