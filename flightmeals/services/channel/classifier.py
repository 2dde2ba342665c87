"""Failure classification for meal service requests."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from flightmeals.core.errors import ChannelError, ErrorKind


@dataclass(frozen=True)
class TransportFailure:
    """
    What went wrong with one attempt, as seen by the transport.

    Exactly one of these is usually meaningful: a status code (a response
    arrived), ``timed_out``, or ``connection_failed`` (no response at all).
    """

    status_code: Optional[int] = None
    body: Optional[Dict[str, Any]] = None
    timed_out: bool = False
    connection_failed: bool = False
    detail: str = ""


@dataclass(frozen=True)
class ClassifiedError:
    """Classifier output: kind, display message, and retry eligibility."""

    kind: ErrorKind
    message: str
    retryable: bool
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def to_exception(self) -> ChannelError:
        """Build the exception the channel raises for this classification."""
        return ChannelError(
            kind=self.kind,
            message=self.message,
            retryable=self.retryable,
            status_code=self.diagnostics.get("status_code"),
            details=dict(self.diagnostics),
        )


DEFAULT_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.UNAUTHORIZED: "Authentication required. Please log in again.",
    ErrorKind.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorKind.NOT_FOUND: "The requested resource was not found.",
    ErrorKind.SERVER_ERROR: "Server error. Please try again later.",
    ErrorKind.TIMEOUT: "Request timeout. Please check your connection and try again.",
    ErrorKind.NETWORK_ERROR: "Unable to reach the meal service. Please check your connection.",
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}


Predicate = Callable[[TransportFailure], bool]

# Evaluated top to bottom; the first matching row wins.
CLASSIFICATION_TABLE: Tuple[Tuple[ErrorKind, Predicate, bool], ...] = (
    (ErrorKind.UNAUTHORIZED, lambda f: f.status_code == 401, False),
    (ErrorKind.FORBIDDEN, lambda f: f.status_code == 403, False),
    (ErrorKind.NOT_FOUND, lambda f: f.status_code == 404, False),
    (ErrorKind.SERVER_ERROR, lambda f: f.status_code is not None and f.status_code >= 500, True),
    (ErrorKind.TIMEOUT, lambda f: f.timed_out, True),
    (ErrorKind.NETWORK_ERROR, lambda f: f.connection_failed and f.status_code is None, True),
)


def resolve_message(kind: ErrorKind, body: Optional[Dict[str, Any]]) -> str:
    """Prefer the service's own message, then its error string, then the default."""
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return DEFAULT_MESSAGES[kind]


def classify(failure: TransportFailure) -> ClassifiedError:
    """
    Map a transport failure onto an error kind.

    Pure function: the same failure always yields the same classification.
    """
    kind, retryable = ErrorKind.UNKNOWN, False
    for candidate, predicate, candidate_retryable in CLASSIFICATION_TABLE:
        if predicate(failure):
            kind, retryable = candidate, candidate_retryable
            break

    diagnostics: Dict[str, Any] = {}
    if failure.status_code is not None:
        diagnostics["status_code"] = failure.status_code
    if failure.detail:
        diagnostics["detail"] = failure.detail

    return ClassifiedError(
        kind=kind,
        message=resolve_message(kind, failure.body),
        retryable=retryable,
        diagnostics=diagnostics,
    )
