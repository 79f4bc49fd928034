"""Value synthesizer: deterministic masked values from a SHA-256 digest.

The digest covers ``original + category`` so that equal values in different
categories get different masked values.  Synthesis is pure: the token store
can always recompute a value it lost to eviction.
"""

from __future__ import annotations
import hashlib
from collections.abc import Mapping

from .types import ATTRIBUTE_MARKER

IPV4_CATEGORY = "ipv4"
HOSTNAME_CATEGORY = "hostname"

# Masked IPs live in 10/8 so they never collide with routable traffic
_IPV4_FMT = "10.{}.{}.{}"
_HOSTNAME_FMT = "host-{}.masked.local"


def synthesize(
    original: str,
    category: str,
    prefixes: Mapping[str, str] | None = None,
) -> str:
    """Return the masked value for ``original`` in ``category``."""
    digest = hashlib.sha256((original + category).encode("utf-8")).digest()
    hex_digest = digest.hex()

    if category == IPV4_CATEGORY:
        return _IPV4_FMT.format(digest[0], digest[1], digest[2])

    if category == HOSTNAME_CATEGORY:
        return _HOSTNAME_FMT.format(hex_digest[:8])

    if category.startswith(ATTRIBUTE_MARKER) and len(category) > len(ATTRIBUTE_MARKER):
        prefix = category[len(ATTRIBUTE_MARKER):] + "-"
    else:
        # Unknown categories silently get no prefix
        prefix = (prefixes or {}).get(category) or ""

    return f"{prefix}{hex_digest[:12]}"


class ValueSynthesizer:
    """``synthesize`` bound to a pattern prefix table."""

    __slots__ = ("_prefixes",)

    def __init__(self, prefixes: Mapping[str, str] | None = None) -> None:
        self._prefixes = dict(prefixes or {})

    def __call__(self, original: str, category: str) -> str:
        return synthesize(original, category, self._prefixes)
