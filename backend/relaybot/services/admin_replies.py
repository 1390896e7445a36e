from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from relaybot.core.config import Settings
from relaybot.schemas.telegram import TgMessage
from relaybot.services import correlator, users
from relaybot.services.correlator import Correlation, CorrelationNotFound
from relaybot.services.telegram_api import TelegramApiError, TelegramClient

log = logging.getLogger("relaybot.admin_replies")

NOT_FOUND_TEXT = "⚠️ Could not find original sender for this message (maybe too old)."
SENT_TEXT = "✅ Reply sent."
ADMIN_HELP_TEXT = (
    "You are the admin. Reply to a forwarded message to answer the guest.\n"
    "Reply with /block or /unblock to stop or resume a guest."
)

BLOCK_COMMAND = "/block"
UNBLOCK_COMMAND = "/unblock"


def _command(message: TgMessage) -> str | None:
    text = (message.text or "").strip()
    if not text.startswith("/"):
        return None
    # "/block@SomeBot extra" -> "/block"
    return text.split()[0].split("@")[0].lower()


def _notify_admin(tg: TelegramClient, settings: Settings, text: str, reply_to: int) -> None:
    try:
        tg.send_text(settings.ADMIN_TG_USER_ID, text, reply_to_message_id=reply_to)
    except TelegramApiError as e:
        log.warning("admin acknowledgment failed: %s", e)


def _set_blocked(
    db: Session, tg: TelegramClient, message: TgMessage, target: Correlation, settings: Settings, blocked: bool
) -> None:
    user = users.set_blocked(db, target.source_user_id, blocked)
    if user is None:
        _notify_admin(tg, settings, NOT_FOUND_TEXT, message.message_id)
        return
    log.info("admin %s user %s", "blocked" if blocked else "unblocked", user.user_id)
    if blocked:
        text = f"🚫 User {user.user_id} blocked."
    else:
        text = f"✅ User {user.user_id} unblocked."
    _notify_admin(tg, settings, text, message.message_id)


def handle_admin_message(db: Session, tg: TelegramClient, message: TgMessage, settings: Settings) -> None:
    cmd = _command(message)

    if message.reply_to_message is None:
        if cmd == "/start":
            _notify_admin(tg, settings, ADMIN_HELP_TEXT, message.message_id)
        else:
            log.debug("admin message %s is not a reply, ignored", message.message_id)
        return

    try:
        target = correlator.resolve(db, message.reply_to_message.message_id)
    except CorrelationNotFound:
        log.info("no mapping for admin reply to %s", message.reply_to_message.message_id)
        _notify_admin(tg, settings, NOT_FOUND_TEXT, message.message_id)
        return

    if cmd == BLOCK_COMMAND:
        _set_blocked(db, tg, message, target, settings, True)
        return
    if cmd == UNBLOCK_COMMAND:
        _set_blocked(db, tg, message, target, settings, False)
        return

    try:
        tg.copy_message(
            target.source_user_id,
            message.chat.id,
            message.message_id,
            reply_to_message_id=target.source_message_id,
        )
    except TelegramApiError as e:
        # e.g. the guest blocked the bot
        log.info("reply to user %s failed: %s", target.source_user_id, e.description)
        _notify_admin(tg, settings, f"❌ Failed to send: {e.description}", message.message_id)
        return

    _notify_admin(tg, settings, SENT_TEXT, message.message_id)
