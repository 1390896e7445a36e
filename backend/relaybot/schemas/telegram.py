"""Inbound Telegram Bot API shapes.

Only the fields the bot reads are declared; everything else Telegram sends
is kept (extra="allow") so content classification can see it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TgUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: str | None = None
    username: str | None = None


class TgChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: str = "private"


class TgMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    message_id: int
    chat: TgChat
    from_user: TgUser | None = Field(default=None, alias="from")
    text: str | None = None
    caption: str | None = None
    reply_to_message: TgMessage | None = None

    def has(self, field: str) -> bool:
        """True if Telegram sent a non-null value for `field` (declared or extra)."""
        if field in type(self).model_fields:
            return getattr(self, field) is not None
        return (self.model_extra or {}).get(field) is not None


class TgCallbackQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    from_user: TgUser = Field(alias="from")
    data: str | None = None
    message: TgMessage | None = None


class Update(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: TgMessage | None = None
    callback_query: TgCallbackQuery | None = None
