"""SQLAlchemy OtpRecord model."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from otp_login.models.base import Base, UTCDateTime


class OtpRecord(Base):
    """One issued login code.

    ``email`` refers to ``users.email`` but is not a foreign key. Rows are
    never deleted; ``consumed`` only ever flips from false to true.
    """

    __tablename__ = "otps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    consumed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_otps_email_consumed", "email", "consumed"),)

    def __repr__(self) -> str:
        return (
            f"<OtpRecord id={self.id} email={self.email!r} "
            f"expires_at={self.expires_at.isoformat()} consumed={self.consumed}>"
        )
