"""Masking engine: the main API.

Usage:
    from redis_masker import (DEFAULT_PATTERNS, MaskingEngine, PatternMatcher,
                              TokenStore, ValueSynthesizer)

    matcher = PatternMatcher(DEFAULT_PATTERNS)
    store = TokenStore(redis.Redis(), ValueSynthesizer(matcher.prefixes))
    engine = MaskingEngine(store, matcher)   # stateless, thread-safe

    engine.mask_field("alice", "username")   # "username-3f1c0a9be2d4"
    engine.mask_body("login from 192.168.1.1")
                                             # "login from 10.87.4.211"

Every masking unit (one field, one pattern match) fails on its own: the
error is logged and that unit is left as it was.
"""

from __future__ import annotations
import logging

from .exceptions import MaskingError
from .patterns import PatternMatcher
from .types import attribute_category
from .vault import TokenStore

logger = logging.getLogger(__name__)


class MaskingEngine:
    """Substitutes masked values into field values and free text."""

    __slots__ = ("store", "matcher")

    def __init__(self, store: TokenStore, matcher: PatternMatcher) -> None:
        self.store = store
        self.matcher = matcher

    def mask_field(
        self,
        value: str,
        field_name: str,
        *,
        deadline: float | None = None,
    ) -> str:
        """Mask a whole attribute value.  Returns it unchanged on error."""
        category = attribute_category(field_name)
        try:
            return self.store.get_or_create(value, category, deadline=deadline)
        except MaskingError as e:
            logger.error("Failed to mask attribute (key=%s, category=%s): %s",
                         field_name, category, e)
            return value

    def mask_body(self, text: str, *, deadline: float | None = None) -> str:
        """Mask every pattern match in ``text``, pattern by pattern.

        Each match is replaced everywhere it literally occurs in the
        current text, not only at the matched span.
        """
        result = text
        for pattern in self.matcher:
            for match in self.matcher.find_all(pattern, result):
                try:
                    masked = self.store.get_or_create(match, pattern.name, deadline=deadline)
                except MaskingError as e:
                    logger.error("Failed to mask value (pattern=%s): %s", pattern.name, e)
                    continue
                result = result.replace(match, masked)
        return result
