from __future__ import annotations


class InsightDeskError(Exception):
    """Base for failures surfaced to API callers."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class UnauthorizedError(InsightDeskError):
    """Authenticated caller identity is required."""

    code = "UNAUTHORIZED"
    status_code = 401


class ConfigurationError(InsightDeskError):
    """A required service credential or endpoint is not configured."""

    code = "CONFIGURATION_ERROR"
    status_code = 500


class IdentityLookupError(InsightDeskError):
    """Caller profile could not be fetched from the identity provider."""

    code = "IDENTITY_LOOKUP_FAILED"
    status_code = 502


class UpstreamError(IdentityLookupError):
    """An upstream HTTP call failed or returned an unusable response."""

    code = "UPSTREAM_ERROR"


class MissingEmailError(InsightDeskError):
    """Identity profile has no usable email address."""

    code = "MISSING_EMAIL"
    status_code = 422


class PersistenceError(InsightDeskError):
    """Store operation failed."""

    code = "PERSISTENCE_ERROR"
    status_code = 500


class IdentityConflictError(PersistenceError):
    """User row for this email is linked to a different external identity."""

    code = "IDENTITY_CONFLICT"
    status_code = 409


class TransactionTimeoutError(PersistenceError):
    """Transaction exceeded its wait budget."""

    code = "TRANSACTION_TIMEOUT"
    status_code = 504


class ProfileUpdateError(InsightDeskError):
    """Failed to update profile."""

    code = "PROFILE_UPDATE_FAILED"
    status_code = 500
