from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from relaybot.core.db import Base
from relaybot.models.enums import OnboardingState


class User(Base):
    __tablename__ = "users"

    # Telegram user id, never reassigned
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    username: Mapped[str | None] = mapped_column(String(64), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    language: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # set only by the admin /block command
    is_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    blocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), server_default=func.now()
    )

    @property
    def state(self) -> OnboardingState:
        if not self.is_verified:
            return OnboardingState.UNVERIFIED
        if not self.language:
            return OnboardingState.VERIFIED_NO_LANGUAGE
        return OnboardingState.READY
