"""Domain exceptions raised by the ledger core.

``ValidationError`` is raised before any remote call is made, ``StoreError``
wraps a failed round trip to the store and ``PrefetchError`` marks a failed
background load. The HTTP layer turns the first two into responses; the third
never leaves the list controller.
"""

from __future__ import annotations

from typing import Any, Optional

SUCCESS_MARKER = "✅"
FAILURE_MARKER = "❌"


class LedgerError(Exception):
    """Base class for ledger errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(LedgerError):
    """Bad user input; the operation was aborted without touching the store."""

    def __init__(self, message: str, reason: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.reason = reason


class StoreError(LedgerError):
    """A remote call to the store failed."""

    def __init__(self, message: str, operation: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.operation = operation

    def banner(self, context: str) -> str:
        return f"{FAILURE_MARKER} {context}: {self.message}"


class PrefetchError(LedgerError):
    """A speculative next-page load failed. Never surfaced to callers."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"Prefetch failed for {key}: {cause}")
        self.key = key
        self.cause = cause


def success_banner(message: str) -> str:
    return f"{SUCCESS_MARKER} {message}"
