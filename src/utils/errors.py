"""Custom exception hierarchy for the Gravity discovery engine.

All application exceptions inherit from :class:`GravityError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "apify", "searchapi", "openai") caused the failure.

    GravityError  (base -- catch-all for any engine error)
    +-- ProviderTimeout      (a provider call exceeded its time budget)
    +-- ProviderError        (a provider call failed or is not configured)
    +-- MalformedResponse    (a provider answered with an unusable payload)
    +-- NoCandidatesFound    (every tier of a dimension came back empty)
    +-- CacheError           (artifact store read/write failure)
    +-- ConfigurationError   (startup / missing config)

Provider-level errors never reach the caller of the engine: the adapter
layer turns them into failed ``ProviderResult`` values and the fallback
orchestrator moves on to the next tier.
"""


class GravityError(Exception):
    """Base exception for all Gravity errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[apify] actor run failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Provider errors (recovered locally by the fallback chain)
# ---------------------------------------------------------------------------

class ProviderTimeout(GravityError):
    """Raised when a provider call does not finish within its timeout."""

    def __init__(
        self,
        message: str = "Provider call timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderError(GravityError):
    """Raised when a provider call fails (HTTP error, SDK error, not configured)."""

    def __init__(
        self,
        message: str = "Provider call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedResponse(GravityError):
    """Raised when a provider returns a payload that cannot be interpreted."""

    def __init__(
        self,
        message: str = "Provider returned a malformed response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoCandidatesFound(GravityError):
    """Raised when a dimension's tiers all completed without a single candidate."""

    def __init__(
        self,
        message: str = "No candidates found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------

class CacheError(GravityError):
    """Raised when the artifact store cannot be read or written."""

    def __init__(
        self,
        message: str = "Artifact cache operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(GravityError):
    """Raised when required configuration is missing or invalid."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
