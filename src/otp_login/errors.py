"""Error taxonomy surfaced by the OTP login core.

The request layer maps these to responses; ``status_code`` is only a hint.
"""

from __future__ import annotations


class OtpLoginError(Exception):
    """Base class for every error raised by the core."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFound(OtpLoginError):
    """No identity is registered for the email."""

    status_code = 404
    default_detail = "User not found"


class Conflict(OtpLoginError):
    """The email is already registered."""

    status_code = 409
    default_detail = "User already exists"


class Unauthorized(OtpLoginError):
    """No active OTP matched.

    Deliberately says nothing about *why* (wrong, expired or never issued).
    """

    status_code = 401
    default_detail = "Invalid or expired OTP"


class DeliveryFailed(OtpLoginError):
    """The notifier could not deliver the code. The record stays stored."""

    status_code = 502
    default_detail = "Failed to deliver OTP"


class InternalError(OtpLoginError):
    """Storage or otherwise unexpected failure."""
