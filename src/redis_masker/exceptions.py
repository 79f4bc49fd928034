"""
Exception classes for redis-masker.

Construction-time errors (config, patterns, connectivity) abort start-up.
``TokenStoreError`` is raised per call and is expected to be caught at the
smallest masking unit (one field, one pattern match).
"""

from __future__ import annotations


class MaskingError(Exception):
    """Base exception for all masking errors."""

    pass


class ConfigError(MaskingError):
    """Invalid configuration.

    Raised while loading settings, before any engine is constructed.
    """

    pass


class PatternCompilationError(MaskingError):
    """A detection pattern has an invalid regular expression.

    Attributes:
        pattern_name: Name of the offending pattern
        reason: Message from the regex compiler
    """

    def __init__(self, pattern_name: str, reason: str):
        self.pattern_name = pattern_name
        self.reason = reason
        super().__init__(f"failed to compile regex pattern '{pattern_name}': {reason}")


class TokenStoreConnectionError(MaskingError):
    """The token store failed its start-up health check.

    Attributes:
        addr: Address of the store that could not be reached
    """

    def __init__(self, addr: str, reason: str):
        self.addr = addr
        self.reason = reason
        super().__init__(f"failed to connect to Redis at {addr}: {reason}")


class TokenStoreError(MaskingError):
    """A store round trip failed while masking a value.

    Attributes:
        category: Category of the value being masked
        reason: Description of the failure
    """

    def __init__(self, category: str, reason: str):
        self.category = category
        self.reason = reason
        super().__init__(f"token store error for category '{category}': {reason}")


class SynthesisUnreachableState(MaskingError):
    """Synthesis reached a state that should not exist.

    Synthesis is total over any input; this is never raised in practice.
    """

    pass
