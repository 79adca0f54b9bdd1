"""SQLAlchemy Identity model."""

from datetime import UTC, datetime

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from otp_login.models.base import Base, UTCDateTime


def normalize_email(email: str) -> str:
    """Case-normalize an email for storage and lookups."""
    return email.strip().lower()


class Identity(Base):
    """A registered account, keyed by its (normalized) email address.

    ``credential_secret`` is stored as supplied; hashing it is the
    registration caller's concern.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    credential_secret: Mapped[str] = mapped_column(String(256), nullable=False)
    external_account_ref: Mapped[str | None] = mapped_column(
        String(256), nullable=True, doc="Linked external account, e.g. a wallet address"
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<Identity id={self.id} name={self.name!r} email={self.email!r}>"
