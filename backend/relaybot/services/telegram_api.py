from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

log = logging.getLogger("relaybot.telegram_api")


class TelegramApiError(Exception):
    """A Bot API call failed (transport error or ok=false)."""

    def __init__(self, method: str, description: str, *, error_code: int | None = None):
        super().__init__(f"{method}: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramClient:
    """Thin synchronous Bot API client over urllib.

    Every call either returns the `result` field or raises TelegramApiError.
    """

    def __init__(self, token: str, *, api_base: str = "https://api.telegram.org", timeout: float = 10):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def call(self, method: str, payload: dict[str, Any]) -> Any:
        api_url = f"{self.api_base}/bot{self.token}/{method}"
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        req = urllib.request.Request(
            api_url,
            data=data,
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read().decode("utf-8", errors="ignore")
        except urllib.error.HTTPError as e:
            # Bot API answers 4xx with a JSON body describing the problem
            body = e.read().decode("utf-8", errors="ignore")
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            log.warning("telegram %s transport error: %s", method, e)
            raise TelegramApiError(method, str(e)) from e

        try:
            js = json.loads(body) if body else {}
        except ValueError:
            raise TelegramApiError(method, f"invalid response: {body[:300]}")

        if not js.get("ok"):
            description = js.get("description") or "unknown error"
            log.warning("telegram %s failed code=%s description=%s", method, js.get("error_code"), description)
            raise TelegramApiError(method, description, error_code=js.get("error_code"))
        return js.get("result")

    # ---------- capabilities ----------

    def send_text(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = None,
        reply_markup: dict | None = None,
        reply_to_message_id: int | None = None,
    ) -> int:
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_markup:
            payload["reply_markup"] = reply_markup
        if reply_to_message_id:
            payload["reply_to_message_id"] = reply_to_message_id
            payload["allow_sending_without_reply"] = True
        result = self.call("sendMessage", payload)
        return int(result["message_id"])

    def edit_text(self, chat_id: int, message_id: int, text: str, *, parse_mode: str | None = None) -> None:
        payload: dict[str, Any] = {"chat_id": chat_id, "message_id": message_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        self.call("editMessageText", payload)

    def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        payload: dict[str, Any] = {"callback_query_id": callback_id}
        if text:
            payload["text"] = text
        self.call("answerCallbackQuery", payload)

    def copy_message(
        self,
        chat_id: int,
        from_chat_id: int,
        message_id: int,
        *,
        caption: str | None = None,
        parse_mode: str | None = None,
        reply_to_message_id: int | None = None,
    ) -> int:
        """Copy a message by reference (no re-upload). Returns the new message id."""
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "from_chat_id": from_chat_id,
            "message_id": message_id,
        }
        if caption is not None:
            payload["caption"] = caption
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_to_message_id:
            payload["reply_to_message_id"] = reply_to_message_id
            payload["allow_sending_without_reply"] = True
        result = self.call("copyMessage", payload)
        return int(result["message_id"])

    def set_webhook(self, url: str, *, secret_token: str | None = None) -> bool:
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": ["message", "callback_query"],
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return bool(self.call("setWebhook", payload))
