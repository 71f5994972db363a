"""
Failure kinds of the lead intake workflow.

Each exception carries the stable machine-readable code returned to JSON
callers, the HTTP status for its fault class and a short message that is
safe to show in a browser. `details` is diagnostic data for operators and
is only ever emitted on the JSON path.
"""

from typing import Any, Optional


class LeadIntakeError(Exception):
    code = "server_error"
    status_code = 500
    message = "Something went wrong. Please try again."

    def __init__(self, details: Optional[Any] = None, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.details = details
        if message:
            self.message = message

    def to_payload(self) -> dict:
        payload = {"ok": False, "error": self.code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class MissingConfiguration(LeadIntakeError):
    code = "missing_env"
    status_code = 500
    message = "Server misconfigured (missing environment variables)."


class MalformedBody(LeadIntakeError):
    code = "invalid_form_data"
    status_code = 400
    message = "Invalid form submission."


class MissingField(LeadIntakeError):
    status_code = 400
    kind = ""


class MissingCategory(MissingField):
    code = "missing_formtype"
    kind = "formType"
    message = "Missing form type."


class MissingEmail(MissingField):
    code = "missing_email"
    kind = "email"
    message = "Please enter an email."


class MissingChallenge(MissingField):
    code = "missing_turnstile"
    kind = "cf-turnstile-response"
    message = "Captcha missing. Please refresh and try again."


class UnrecognizedCategory(LeadIntakeError):
    code = "unknown_formtype"
    status_code = 400
    message = "Unknown form type."


class ChallengeRejected(LeadIntakeError):
    code = "turnstile_failed"
    status_code = 400
    message = "Captcha failed. Please try again."


class UnroutableCategory(LeadIntakeError):
    """No mailbox configured for a recognized form type (operator fault)"""
    code = "unroutable_formtype"
    status_code = 500
    message = "This form is not accepting submissions right now."


class DispatchFailed(LeadIntakeError):
    code = "resend_failed"
    status_code = 502
    message = "Message failed to send. Please try again."


class Unexpected(LeadIntakeError):
    code = "server_error"
    status_code = 500
