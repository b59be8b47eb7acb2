"""Errors raised by the marketing form pipeline."""


class SubmissionError(Exception):
    """Base for errors surfaced to the client as a JSON error body."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        body = {"success": False, "code": self.code, "error": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(SubmissionError):
    """Malformed or incomplete form input. Nothing has been sent or stored."""

    code = "BAD_REQUEST"
    status_code = 400


class UnauthorizedError(SubmissionError):
    """CAPTCHA verification failed or could not be confirmed."""

    code = "UNAUTHORIZED"
    status_code = 401


class InternalError(SubmissionError):
    """Storage failed; the client should resubmit."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500


class ExternalSyncError(Exception):
    """A Klaviyo call failed. Caught inside the CRM client, never surfaced."""
