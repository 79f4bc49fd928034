"""redis-masker: deterministic, Redis-backed masking of sensitive values."""

from .masker import MaskingEngine
from .vault import TokenStore
from .patterns import PatternMatcher, DEFAULT_PATTERNS
from .synthesizer import ValueSynthesizer, synthesize
from .processor import MaskingProcessor
from .config import create_processor, load_config, load_from_yaml
from .types import MaskingSettings, Pattern, PatternConfig
from .exceptions import (
    MaskingError,
    ConfigError,
    PatternCompilationError,
    TokenStoreConnectionError,
    TokenStoreError,
    SynthesisUnreachableState,
)

__all__ = [
    "MaskingEngine",
    "TokenStore",
    "PatternMatcher", "DEFAULT_PATTERNS",
    "ValueSynthesizer", "synthesize",
    "MaskingProcessor",
    "create_processor", "load_config", "load_from_yaml",
    "MaskingSettings", "Pattern", "PatternConfig",
    "MaskingError", "ConfigError", "PatternCompilationError",
    "TokenStoreConnectionError", "TokenStoreError", "SynthesisUnreachableState",
]
__version__ = "0.1.0"
