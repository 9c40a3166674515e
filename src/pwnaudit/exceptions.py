"""
Exception hierarchy for pwnaudit.

Hierarchy:
    PwnAuditError
    ├── StoreError
    │   └── StoreNotFoundError
    ├── DecryptionError
    └── BreachCheckError
        ├── FingerprintError
        ├── RequestFailedError
        ├── RateLimitedError
        ├── UnexpectedStatusError
        └── ResponseReadError

Only StoreError aborts a scan. Everything else is recorded against a
single entry.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""


class PwnAuditError(Exception):
    """Base exception for all pwnaudit errors."""


# =============================================================================
# Store
# =============================================================================

class StoreError(PwnAuditError):
    """The password store cannot be used at all."""


class StoreNotFoundError(StoreError):
    """Store path is missing, inaccessible, or holds no entries."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class DecryptionError(PwnAuditError):
    """A single store entry could not be decrypted."""

    def __init__(self, message: str, path: str | None = None, stderr: str | None = None):
        self.path = path
        self.stderr = stderr
        super().__init__(message)


# =============================================================================
# Breach checks
# =============================================================================

class BreachCheckError(PwnAuditError):
    """A breach check for one secret did not reach a verdict."""


class FingerprintError(BreachCheckError):
    """The secret could not be hashed."""


class RequestFailedError(BreachCheckError):
    """Transport failure or timeout talking to the range API."""


class RateLimitedError(BreachCheckError):
    """The range API answered 429 Too Many Requests."""

    def __init__(self, retry_after: str | None = None):
        self.retry_after = retry_after
        if retry_after:
            message = f"rate limited by range API (wait {retry_after} seconds)"
        else:
            message = "rate limited by range API (no Retry-After given)"
        super().__init__(message)


class UnexpectedStatusError(BreachCheckError):
    """The range API answered with a status other than 200 or 429."""

    def __init__(self, status: int, body: str, prefix: str | None = None):
        self.status = status
        self.body = body
        self.prefix = prefix
        super().__init__(
            f"range API returned HTTP {status} for prefix {prefix} - Body: {body[:200]}"
        )


class ResponseReadError(BreachCheckError):
    """The response body broke off before a verdict was reached."""
