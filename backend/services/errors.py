"""Exception types raised by the scoring core.

Only two conditions are surfaced to callers: unknown record references
(recoverable) and invalid scoring configuration (fatal, raised at load time).
Everything else degrades to neutral scores.
"""

from typing import Any


class BiasWatchError(Exception):
    """Base exception for the bias-aware scoring core."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(BiasWatchError, LookupError):
    """Raised when a caller references a candidate, mandate or source that does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            f"{entity.capitalize()} not found: {entity_id}",
            error_code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ConfigurationError(BiasWatchError, ValueError):
    """Raised when scoring configuration fails validation at load time."""

    def __init__(self, message: str, source: str | None = None, errors: list | None = None) -> None:
        details: dict[str, Any] = {}
        if source:
            details["source"] = source
        if errors:
            details["errors"] = errors
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details)
