"""Value objects handed back to the request layer."""

from pydantic import BaseModel


class OtpRequestAck(BaseModel):
    """Acknowledges an issued OTP. Never carries the code itself."""

    success: bool
    message: str


class Profile(BaseModel):
    """Public view of an identity returned after a successful login."""

    display_name: str
    external_account_ref: str | None = None
