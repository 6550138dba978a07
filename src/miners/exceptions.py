"""
Mining Errors.

Failures that abort a whole insights request. Per-repository enrichment problems
are not errors; they show up as degraded repository records instead.
"""

from typing import Optional


class MinerError(Exception):
    """Base class for repository mining failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (status {self.status_code})"
        return self.message


class Unauthorized(MinerError):
    """The access token is missing, invalid or revoked."""


class UpstreamUnavailable(MinerError):
    """The hosting API could not be reached or refused to serve the request."""
