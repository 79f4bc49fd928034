"""Pattern matcher: detection regexes compiled once at start-up.

Patterns are applied in configured order.  A later pattern scans the text
as already substituted by the earlier ones, so order is part of the output.
"""

from __future__ import annotations
import re
from collections.abc import Iterable, Iterator

from .exceptions import PatternCompilationError
from .types import Pattern, PatternConfig

# Stock patterns used when the configuration does not list any.
# (?a): \d and \b match ASCII only
DEFAULT_PATTERNS: tuple[PatternConfig, ...] = (
    PatternConfig(
        name="ipv4",
        regex=r"(?a)\b(?:\d{1,3}\.){3}\d{1,3}\b",
        masked_prefix="IP-",
    ),
    # Dotted names with an alphabetic TLD, so masked IPs are not re-matched
    PatternConfig(
        name="hostname",
        regex=(
            r"(?a)\b(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+"
            r"[a-zA-Z]{2,63}\b"
        ),
        masked_prefix="HOST-",
    ),
)


class PatternMatcher:
    """Ordered, read-only set of compiled detection patterns."""

    __slots__ = ("_patterns", "_prefixes")

    def __init__(self, configs: Iterable[PatternConfig]) -> None:
        compiled: list[Pattern] = []
        for cfg in configs:
            try:
                regex = re.compile(cfg.regex)
            except re.error as e:
                raise PatternCompilationError(cfg.name, str(e)) from e
            compiled.append(Pattern(cfg.name, regex, cfg.masked_prefix))
        self._patterns: tuple[Pattern, ...] = tuple(compiled)
        self._prefixes: dict[str, str] = {}
        for p in self._patterns:
            # First pattern with a given name wins the prefix lookup
            self._prefixes.setdefault(p.name, p.masked_prefix)

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    @property
    def prefixes(self) -> dict[str, str]:
        """Copy of the pattern name → masked prefix table."""
        return dict(self._prefixes)

    def prefix_for(self, category: str) -> str | None:
        return self._prefixes.get(category)

    @staticmethod
    def find_all(pattern: Pattern, text: str) -> list[str]:
        """All whole-match substrings in order of occurrence, duplicates kept."""
        # finditer, not findall: findall returns groups for grouped regexes
        return [m.group(0) for m in pattern.regex.finditer(text)]

    def scan(self, text: str) -> Iterator[tuple[Pattern, list[str]]]:
        """Yield (pattern, matches) for every pattern against the same text."""
        for pattern in self._patterns:
            yield pattern, self.find_all(pattern, text)

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)
