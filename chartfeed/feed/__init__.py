"""Feed layer: fallback orchestration, synthetic data, reference quotes."""

from chartfeed.feed.factory import build_orchestrator, build_provider
from chartfeed.feed.orchestrator import FallbackOrchestrator
from chartfeed.feed.reference import (
    DEFAULT_DIRECTORY,
    POPULAR_SYMBOLS,
    REFERENCE_QUOTES,
    ReferenceDirectory,
)
from chartfeed.feed.synthetic import MockDataGenerator

__all__ = [
    "DEFAULT_DIRECTORY",
    "POPULAR_SYMBOLS",
    "REFERENCE_QUOTES",
    "FallbackOrchestrator",
    "MockDataGenerator",
    "ReferenceDirectory",
    "build_orchestrator",
    "build_provider",
]
