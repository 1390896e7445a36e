from __future__ import annotations

import html
from typing import Iterable, Sequence

# Bot API limits, counted in characters
MESSAGE_MAX_LEN = 4096
CAPTION_MAX_LEN = 1024
ELLIPSIS = "..."


def normalize_tg_username(value: str | None) -> str:
    v = (value or "").strip()
    if v.startswith("@"):
        v = v[1:]
    return v.lower()


def escape(text: str | None) -> str:
    return html.escape(text or "", quote=False)


def display_name(user_id: int, first_name: str | None, username: str | None) -> str:
    name = (first_name or "").strip()
    if name:
        return name
    uname = normalize_tg_username(username)
    if uname:
        return f"@{uname}"
    return str(user_id)


def user_link(user_id: int, name: str) -> str:
    return f'<a href="tg://user?id={int(user_id)}">{escape(name)}</a>'


def clip_html(text: str, limit: int) -> str:
    """Cut `text` to at most `limit` chars, ending with an ellipsis when cut.

    Never leaves half of an HTML entity (e.g. "&am") at the cut point.
    """
    if len(text) <= limit:
        return text
    cut = text[: max(limit - len(ELLIPSIS), 0)]
    amp = cut.rfind("&")
    if amp != -1 and ";" not in cut[amp:]:
        cut = cut[:amp]
    return cut + ELLIPSIS


def inline_button(text: str, callback_data: str) -> dict:
    return {"text": text, "callback_data": callback_data}


def inline_keyboard(rows: Iterable[Sequence[dict]]) -> dict:
    return {"inline_keyboard": [list(row) for row in rows]}
