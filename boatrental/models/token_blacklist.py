"""Revoked session tokens, written on logout when revocation is enabled."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from boatrental.core.database import Base


class TokenBlacklist(Base):
    """A revoked session token identified by its JTI claim.

    Entries are created on logout and cleaned up after expiry.
    """

    __tablename__ = "token_blacklist"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
