"""
Unified exception definitions for dexwatch.

All custom exceptions inherit from DexwatchError for easy catching.
"""

from typing import Any, Optional


class DexwatchError(Exception):
    """Base exception for all dexwatch errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DEXWATCH_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging/serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DexwatchError):
    """Configuration, ABI or startup errors. Fatal before the loop starts."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="CONFIG_ERROR", **kwargs)


class VenueError(DexwatchError):
    """A venue quote call failed (RPC transport, revert, bad response)."""

    def __init__(self, message: str, *, venue: str, **kwargs):
        details = kwargs.pop("details", {})
        details["venue"] = venue
        super().__init__(message, code="VENUE_ERROR", details=details, **kwargs)
        self.venue = venue


class StoreError(DexwatchError):
    """Persisting an opportunity failed."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[Exception] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, code="STORE_ERROR", details=details, **kwargs)
        self.cause = cause
