"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause while still discriminating on subclass.
"""

from __future__ import annotations

from collections.abc import Sequence


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Request ──────────────────────────────────────────────────
class UnknownActionError(DomainError):
    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__("Unknown action", code="UNKNOWN_ACTION")


class MissingContextFieldError(DomainError):
    """The action needs a context field the request did not carry."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__("Malformed request body", code="MISSING_CONTEXT_FIELD")


# ── Provider availability ────────────────────────────────────
class NoCandidatesEligibleError(DomainError):
    """No provider in a capability's priority list has credit left."""

    def __init__(
        self,
        capability: str,
        candidates: Sequence[str],
        message: str = "No providers available",
    ) -> None:
        self.capability = capability
        self.candidates = list(candidates)
        super().__init__(message, code="NO_CANDIDATES_ELIGIBLE")


class AllCandidatesFailedError(DomainError):
    """Every eligible provider was tried and none produced a result."""

    def __init__(
        self,
        capability: str,
        candidates: Sequence[str],
        errors: dict[str, str] | None = None,
    ) -> None:
        self.capability = capability
        self.candidates = list(candidates)
        self.errors = dict(errors or {})
        super().__init__("All providers failed", code="ALL_CANDIDATES_FAILED")


class ProviderCallFailedError(DomainError):
    """A single adapter call failed (network, status code, or payload shape)."""

    def __init__(self, codename: str, reason: str) -> None:
        self.codename = codename
        self.reason = reason
        super().__init__(f"[{codename}] {reason}", code="PROVIDER_CALL_FAILED")


# ── Infrastructure ───────────────────────────────────────────
class CreditStoreError(DomainError):
    """The credit store could not be read or written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CREDIT_STORE_UNAVAILABLE")
