"""Unit tests for failure classification."""
import pytest

from flightmeals.core.errors import ChannelError, ErrorKind
from flightmeals.services.channel.classifier import (
    CLASSIFICATION_TABLE,
    DEFAULT_MESSAGES,
    TransportFailure,
    classify,
    resolve_message,
)


class TestClassificationRules:
    """Test each row of the classification table."""

    @pytest.mark.parametrize(
        "status_code, kind, retryable",
        [
            (401, ErrorKind.UNAUTHORIZED, False),
            (403, ErrorKind.FORBIDDEN, False),
            (404, ErrorKind.NOT_FOUND, False),
            (500, ErrorKind.SERVER_ERROR, True),
            (502, ErrorKind.SERVER_ERROR, True),
            (503, ErrorKind.SERVER_ERROR, True),
            (400, ErrorKind.UNKNOWN, False),
            (409, ErrorKind.UNKNOWN, False),
            (422, ErrorKind.UNKNOWN, False),
        ],
    )
    def test_status_codes(self, status_code, kind, retryable):
        """Test that documented status codes map to their kinds."""
        result = classify(TransportFailure(status_code=status_code))

        assert result.kind == kind
        assert result.retryable is retryable
        assert result.message == DEFAULT_MESSAGES[kind]

    def test_timeout(self):
        """Test that a transport timeout is a retryable Timeout."""
        result = classify(TransportFailure(timed_out=True))

        assert result.kind == ErrorKind.TIMEOUT
        assert result.retryable is True

    def test_connection_failure(self):
        """Test that no response at all is a retryable NetworkError."""
        result = classify(TransportFailure(connection_failed=True))

        assert result.kind == ErrorKind.NETWORK_ERROR
        assert result.retryable is True

    def test_nothing_known_is_unknown(self):
        """Test that an unrecognized failure falls through to Unknown."""
        result = classify(TransportFailure(detail="TooManyRedirects"))

        assert result.kind == ErrorKind.UNKNOWN
        assert result.retryable is False

    def test_status_wins_over_timeout_flag(self):
        """Test that rules are applied in priority order."""
        result = classify(TransportFailure(status_code=401, timed_out=True))
        assert result.kind == ErrorKind.UNAUTHORIZED

    def test_table_is_ordered_by_priority(self):
        """Test that the table lists kinds in the documented order."""
        kinds = [row[0] for row in CLASSIFICATION_TABLE]
        assert kinds == [
            ErrorKind.UNAUTHORIZED,
            ErrorKind.FORBIDDEN,
            ErrorKind.NOT_FOUND,
            ErrorKind.SERVER_ERROR,
            ErrorKind.TIMEOUT,
            ErrorKind.NETWORK_ERROR,
        ]


class TestMessageResolution:
    """Test message selection."""

    def test_prefers_body_message(self):
        """Test that the service's message field is used first."""
        body = {"success": False, "message": "Slot closed for ordering", "error": "SLOT_LOCKED"}
        result = classify(TransportFailure(status_code=500, body=body))

        assert result.message == "Slot closed for ordering"

    def test_falls_back_to_error_field(self):
        """Test that the envelope's error string is used when no message is given."""
        body = {"success": False, "error": "Order must contain at least one item"}
        result = classify(TransportFailure(status_code=400, body=body))

        assert result.message == "Order must contain at least one item"

    def test_blank_message_uses_default(self):
        """Test that blank strings are ignored."""
        assert resolve_message(ErrorKind.FORBIDDEN, {"message": "  "}) == DEFAULT_MESSAGES[ErrorKind.FORBIDDEN]

    def test_every_kind_has_a_default_message(self):
        """Test that every transport kind has a fallback string."""
        for kind, _, _ in CLASSIFICATION_TABLE:
            assert DEFAULT_MESSAGES[kind]
        assert DEFAULT_MESSAGES[ErrorKind.UNKNOWN]


class TestClassifiedError:
    """Test conversion to the raised exception."""

    def test_to_exception_keeps_diagnostics(self):
        """Test that status code and detail survive for internal logging."""
        result = classify(TransportFailure(status_code=503, detail="GET /menu -> 503"))
        error = result.to_exception()

        assert isinstance(error, ChannelError)
        assert error.kind == ErrorKind.SERVER_ERROR
        assert error.retryable is True
        assert error.status_code == 503
        assert error.details["detail"] == "GET /menu -> 503"
        # Display message carries no raw diagnostics
        assert "503" not in error.message

    def test_classification_is_pure(self):
        """Test that the same input always yields the same output."""
        failure = TransportFailure(status_code=404)
        assert classify(failure) == classify(failure)
