from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from relaybot.core.db import Base


class MessageMapping(Base):
    """Admin-side copy of a relayed guest message -> where it came from."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # message id of the copy in the admin chat (correlation key)
    relay_message_id: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True, index=True)

    source_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    source_message_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True, default=lambda: datetime.now(timezone.utc), server_default=func.now()
    )
