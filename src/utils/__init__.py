"""Utility modules for the Gravity discovery engine.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain exception hierarchy rooted at GravityError; every
  error carries the name of the provider that raised it.
- **concurrency** -- semaphore-throttled gather and the deadline-bounded
  fan-out used by the fallback orchestrator.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **json_extraction** -- ordered strategies for pulling JSON out of LLM text.
- **audience** (not re-exported here) -- follower parsing, tiering, price
  and reach estimates, post sentiment and type tags.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    CacheError,
    ConfigurationError,
    GravityError,
    MalformedResponse,
    NoCandidatesFound,
    ProviderError,
    ProviderTimeout,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import run_with_deadline, throttled_gather

# -- JSON extraction from model output -------------------------------------
from src.utils.json_extraction import extract_json

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "CacheError",
    "ConfigurationError",
    "GravityError",
    "MalformedResponse",
    "NoCandidatesFound",
    "ProviderError",
    "ProviderTimeout",
    "configure_logging",
    "extract_json",
    "get_logger",
    "run_with_deadline",
    "throttled_gather",
]
