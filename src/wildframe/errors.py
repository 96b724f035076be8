"""Error taxonomy for sequence and keyframe generation."""

from enum import Enum


class ErrorKind(str, Enum):
    """How a collaborator failure should be treated by the orchestrator."""

    TRANSIENT = "transient"
    QUOTA_EXCEEDED = "quota_exceeded"


class WildframeError(Exception):
    """Base class for all wildframe errors."""

    @property
    def message(self) -> str:
        return str(self)


class InvalidConfiguration(WildframeError):
    """An option key (e.g. a duration category) is not recognised."""


class MalformedResponse(WildframeError):
    """The collaborator answered, but not with a usable scene sequence."""


class TransportFailure(WildframeError):
    """The collaborator call itself failed."""

    kind = ErrorKind.TRANSIENT


class QuotaExceeded(TransportFailure):
    """The collaborator refused the call because quota or rate limits ran out."""

    kind = ErrorKind.QUOTA_EXCEEDED


class InvalidState(WildframeError):
    """An operation was requested on state that cannot support it."""
