from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any

from relaybot.services.telegram_api import TelegramApiError

ADMIN_ID = 999


@dataclass
class SentCall:
    method: str
    args: dict[str, Any]


class FakeTelegram:
    """Records every Bot API capability call instead of talking to Telegram.

    `fail_on` maps a method name to a description; the next call of that
    method raises TelegramApiError with it.
    """

    def __init__(self, first_message_id: int = 5000):
        self.calls: list[SentCall] = []
        self.fail_on: dict[str, str] = {}
        self._ids = count(first_message_id)

    def _record(self, method: str, **args) -> None:
        self.calls.append(SentCall(method, args))
        if method in self.fail_on:
            raise TelegramApiError(method, self.fail_on.pop(method))

    def send_text(self, chat_id, text, *, parse_mode=None, reply_markup=None, reply_to_message_id=None) -> int:
        self._record(
            "send_text",
            chat_id=chat_id,
            text=text,
            parse_mode=parse_mode,
            reply_markup=reply_markup,
            reply_to_message_id=reply_to_message_id,
        )
        return next(self._ids)

    def edit_text(self, chat_id, message_id, text, *, parse_mode=None) -> None:
        self._record("edit_text", chat_id=chat_id, message_id=message_id, text=text, parse_mode=parse_mode)

    def answer_callback(self, callback_id, text=None) -> None:
        self._record("answer_callback", callback_id=callback_id, text=text)

    def copy_message(
        self, chat_id, from_chat_id, message_id, *, caption=None, parse_mode=None, reply_to_message_id=None
    ) -> int:
        self._record(
            "copy_message",
            chat_id=chat_id,
            from_chat_id=from_chat_id,
            message_id=message_id,
            caption=caption,
            parse_mode=parse_mode,
            reply_to_message_id=reply_to_message_id,
        )
        return next(self._ids)

    # ---------- helpers for assertions ----------

    def of(self, method: str) -> list[dict[str, Any]]:
        return [c.args for c in self.calls if c.method == method]

    def to(self, chat_id: int) -> list[SentCall]:
        return [c for c in self.calls if c.args.get("chat_id") == chat_id]

    def texts_to(self, chat_id: int) -> list[str]:
        return [c.args["text"] for c in self.calls if c.method == "send_text" and c.args["chat_id"] == chat_id]


@dataclass
class FakeTranslator:
    enabled: bool = True
    prefix: str = "[zh] "
    calls: list[tuple[str, str]] = field(default_factory=list)

    def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if not self.enabled:
            return text
        return f"{self.prefix}{text}"


_update_ids = count(1)


def tg_user(user_id: int, first_name: str | None = "Alice", username: str | None = "alice") -> dict:
    return {"id": user_id, "is_bot": False, "first_name": first_name, "username": username}


def message_update(
    user_id: int,
    *,
    message_id: int = 1,
    text: str | None = None,
    first_name: str | None = "Alice",
    username: str | None = "alice",
    chat_type: str = "private",
    reply_to: int | None = None,
    **content: Any,
) -> dict:
    msg: dict[str, Any] = {
        "message_id": message_id,
        "date": 1760000000,
        "chat": {"id": user_id, "type": chat_type},
        "from": tg_user(user_id, first_name, username),
    }
    if text is not None:
        msg["text"] = text
    if reply_to is not None:
        msg["reply_to_message"] = {
            "message_id": reply_to,
            "date": 1760000000,
            "chat": {"id": user_id, "type": chat_type},
        }
    msg.update(content)
    return {"update_id": next(_update_ids), "message": msg}


def callback_update(
    user_id: int,
    data: str,
    *,
    callback_id: str = "cb-1",
    message_id: int = 77,
    first_name: str | None = "Alice",
    username: str | None = "alice",
) -> dict:
    return {
        "update_id": next(_update_ids),
        "callback_query": {
            "id": callback_id,
            "from": tg_user(user_id, first_name, username),
            "data": data,
            "message": {
                "message_id": message_id,
                "date": 1760000000,
                "chat": {"id": user_id, "type": "private"},
            },
        },
    }


PHOTO = [{"file_id": "AgAD", "file_unique_id": "u1", "width": 90, "height": 90}]
STICKER = {"file_id": "CAAD", "file_unique_id": "s1", "type": "regular", "width": 512, "height": 512}
