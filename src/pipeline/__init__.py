"""Discovery pipeline: per-dimension fallback, streaming and the engine facade."""

from src.pipeline.discovery_engine import DiscoveryEngine
from src.pipeline.fallback_orchestrator import DimensionRun, FallbackOrchestrator
from src.pipeline.stream_emitter import StreamEmitter

__all__ = [
    "DimensionRun",
    "DiscoveryEngine",
    "FallbackOrchestrator",
    "StreamEmitter",
]
