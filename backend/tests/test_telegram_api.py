import io
import json
import urllib.error

import pytest

from relaybot.services import telegram_api
from relaybot.services.telegram_api import TelegramApiError, TelegramClient


class _Resp(io.BytesIO):
    status = 200

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture()
def captured(monkeypatch):
    box = {"requests": [], "responses": []}

    def fake_urlopen(req, timeout=None):
        box["requests"].append((req, json.loads(req.data.decode("utf-8")), timeout))
        resp = box["responses"].pop(0)
        if isinstance(resp, Exception):
            raise resp
        return _Resp(json.dumps(resp).encode("utf-8"))

    monkeypatch.setattr(telegram_api.urllib.request, "urlopen", fake_urlopen)
    return box


def test_copy_message_returns_new_id(captured):
    captured["responses"].append({"ok": True, "result": {"message_id": 321}})
    client = TelegramClient("TOKEN", timeout=3)

    new_id = client.copy_message(999, 10, 5, caption="cap", parse_mode="HTML")

    req, body, timeout = captured["requests"][0]
    assert new_id == 321
    assert req.full_url == "https://api.telegram.org/botTOKEN/copyMessage"
    assert body == {"chat_id": 999, "from_chat_id": 10, "message_id": 5, "caption": "cap", "parse_mode": "HTML"}
    assert timeout == 3


def test_send_text_with_keyboard_and_reply(captured):
    captured["responses"].append({"ok": True, "result": {"message_id": 1}})
    client = TelegramClient("TOKEN")

    client.send_text(10, "hi", reply_markup={"inline_keyboard": []}, reply_to_message_id=4)

    _, body, _ = captured["requests"][0]
    assert body["reply_markup"] == {"inline_keyboard": []}
    assert body["reply_to_message_id"] == 4
    assert body["allow_sending_without_reply"] is True
    assert "parse_mode" not in body


def test_ok_false_raises_with_description(captured):
    captured["responses"].append({"ok": False, "error_code": 403, "description": "Forbidden: bot was blocked by the user"})

    with pytest.raises(TelegramApiError) as exc:
        TelegramClient("TOKEN").copy_message(10, 999, 1)

    assert exc.value.description == "Forbidden: bot was blocked by the user"
    assert exc.value.error_code == 403
    assert exc.value.method == "copyMessage"


def test_http_error_body_is_parsed(captured):
    body = io.BytesIO(json.dumps({"ok": False, "error_code": 400, "description": "Bad Request: chat not found"}).encode())
    captured["responses"].append(urllib.error.HTTPError("url", 400, "Bad Request", {}, body))

    with pytest.raises(TelegramApiError) as exc:
        TelegramClient("TOKEN").answer_callback("cb", "hi")

    assert exc.value.description == "Bad Request: chat not found"


def test_transport_error_raises(captured):
    captured["responses"].append(urllib.error.URLError("timed out"))

    with pytest.raises(TelegramApiError):
        TelegramClient("TOKEN").edit_text(10, 1, "x")
