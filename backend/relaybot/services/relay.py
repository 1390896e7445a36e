"""Relay of guest messages to the admin chat.

A guest message is classified into exactly one of TextContent, MediaContent
or OtherContent; each kind has a single delivery strategy:

- text: header + text (+ translation) in one HTML message
- media: copied by reference with header + original caption as the new caption
- other (stickers, dice, ...): header message first, then the copy as a reply to it

A MessageMapping is recorded only after the delivery that produces its key succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from relaybot.core.config import Settings
from relaybot.core.tg import CAPTION_MAX_LEN, MESSAGE_MAX_LEN, clip_html, display_name, escape, user_link
from relaybot.models.user import User
from relaybot.schemas.telegram import TgMessage
from relaybot.services import correlator
from relaybot.services.telegram_api import TelegramApiError, TelegramClient
from relaybot.services.translator import Translator

log = logging.getLogger("relaybot.relay")

# order decides which kind wins if Telegram ever sends more than one
MEDIA_KINDS = ("photo", "video", "document", "voice", "audio", "animation")
OTHER_KINDS = (
    "sticker",
    "dice",
    "video_note",
    "location",
    "venue",
    "contact",
    "poll",
    "game",
    "story",
)

PARSE_MODE = "HTML"
UNDELIVERED_NOTE = "⚠️ Content could not be delivered"
TRANSLATION_LABEL = "\n\n<b>Translation:</b>\n"


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class MediaContent:
    kind: str
    caption: str | None


@dataclass(frozen=True)
class OtherContent:
    kind: str


Content = Union[TextContent, MediaContent, OtherContent]


def classify_message(message: TgMessage) -> Content:
    if message.text is not None:
        return TextContent(text=message.text)
    for kind in MEDIA_KINDS:
        if message.has(kind):
            return MediaContent(kind=kind, caption=message.caption)
    for kind in OTHER_KINDS:
        if message.has(kind):
            return OtherContent(kind=kind)
    return OtherContent(kind="unknown")


def build_header(user: User) -> str:
    name = display_name(user.user_id, user.first_name, user.username)
    return (
        "📩 <b>New Message</b>\n"
        f"From: {user_link(user.user_id, name)} ({user.user_id})\n"
        f"Lang: {escape(user.language)}"
    )


def needs_translation(user: User, settings: Settings) -> bool:
    return (user.language or "") != settings.ADMIN_LANGUAGE


def build_text_body(header: str, text: str, user: User, translator: Translator, settings: Settings) -> str:
    # markup (header, label) is never clipped, only the escaped user text
    prefix = f"{header}\n\n"
    original = escape(text)
    translated = ""
    if translator.enabled and needs_translation(user, settings):
        result = translator.translate(text, settings.admin_language_name())
        if result.strip() != text.strip():
            translated = escape(result)

    available = MESSAGE_MAX_LEN - len(prefix)
    if not translated:
        return prefix + clip_html(original, available)

    available -= len(TRANSLATION_LABEL)
    # the original keeps at least half the room when both don't fit
    original = clip_html(original, max(available - len(translated), available // 2))
    translated = clip_html(translated, available - len(original))
    return f"{prefix}{original}{TRANSLATION_LABEL}{translated}"


def build_caption(header: str, caption: str | None) -> str:
    prefix = f"{header}\n\n"
    return prefix + clip_html(escape(caption), CAPTION_MAX_LEN - len(prefix))


def _deliver(
    tg: TelegramClient,
    content: Content,
    message: TgMessage,
    user: User,
    translator: Translator,
    settings: Settings,
) -> int:
    admin_id = settings.ADMIN_TG_USER_ID
    header = build_header(user)

    if isinstance(content, TextContent):
        body = build_text_body(header, content.text, user, translator, settings)
        return tg.send_text(admin_id, body, parse_mode=PARSE_MODE)

    if isinstance(content, MediaContent):
        return tg.copy_message(
            admin_id,
            message.chat.id,
            message.message_id,
            caption=build_caption(header, content.caption),
            parse_mode=PARSE_MODE,
        )

    header_id = tg.send_text(admin_id, header, parse_mode=PARSE_MODE)
    try:
        return tg.copy_message(admin_id, message.chat.id, message.message_id, reply_to_message_id=header_id)
    except TelegramApiError:
        # don't leave a header that looks like a complete relay
        try:
            tg.edit_text(admin_id, header_id, f"{header}\n\n{UNDELIVERED_NOTE}", parse_mode=PARSE_MODE)
        except TelegramApiError as e:
            log.warning("could not mark orphaned header %s: %s", header_id, e)
        raise


def relay_guest_message(
    db: Session,
    tg: TelegramClient,
    translator: Translator,
    message: TgMessage,
    user: User,
    settings: Settings,
) -> int:
    """Deliver a guest message to the admin and record its correlation key.

    Raises TelegramApiError if delivery fails; nothing is recorded then.
    """
    content = classify_message(message)
    relay_message_id = _deliver(tg, content, message, user, translator, settings)

    correlator.record(
        db,
        relay_message_id=relay_message_id,
        source_user_id=user.user_id,
        source_message_id=message.message_id,
    )
    log.info(
        "relayed %s message %s from user %s as %s",
        type(content).__name__,
        message.message_id,
        user.user_id,
        relay_message_id,
    )
    return relay_message_id
