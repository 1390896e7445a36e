"""Guest onboarding: human verification, then language selection.

States are derived from the user row (see User.state):
UNVERIFIED -> VERIFIED_NO_LANGUAGE -> READY. Blocked users get no response.

Every transition commits before its acknowledgment is sent; a failed
acknowledgment is logged and never rolls the state back.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from relaybot.core.config import Settings
from relaybot.core.tg import inline_button, inline_keyboard
from relaybot.models.enums import OnboardingState
from relaybot.models.user import User
from relaybot.schemas.telegram import TgCallbackQuery, TgUser
from relaybot.services import users
from relaybot.services.telegram_api import TelegramApiError, TelegramClient

log = logging.getLogger("relaybot.onboarding")

VERIFY_CALLBACK = "verify_human"
LANG_CALLBACK_PREFIX = "lang_"

VERIFY_PROMPT = "Please verify you are human by clicking the button below."
VERIFY_REMINDER = "Please verify you are human first."
LANGUAGE_PROMPT = "Please select your language / 请选择语言:"
WELCOME = "Welcome! You can send me messages and I will forward them to the admin."


def _ack(fn, *args, **kwargs) -> None:
    try:
        fn(*args, **kwargs)
    except TelegramApiError as e:
        log.warning("onboarding acknowledgment failed: %s", e)


def language_keyboard(settings: Settings) -> dict:
    rows = [
        [inline_button(lang.name, f"{LANG_CALLBACK_PREFIX}{lang.code}") for lang in row]
        for row in settings.languages.rows(per_row=2)
    ]
    return inline_keyboard(rows)


def send_verification_prompt(tg: TelegramClient, chat_id: int, *, reminder: bool = False) -> None:
    if reminder:
        text, button = VERIFY_REMINDER, "✅ Verify"
    else:
        text, button = VERIFY_PROMPT, "✅ I am Human"
    tg.send_text(chat_id, text, reply_markup=inline_keyboard([[inline_button(button, VERIFY_CALLBACK)]]))


def send_language_prompt(tg: TelegramClient, chat_id: int, settings: Settings) -> None:
    tg.send_text(chat_id, LANGUAGE_PROMPT, reply_markup=language_keyboard(settings))


def prompt_for_state(tg: TelegramClient, user: User, settings: Settings, *, reminder: bool = False) -> None:
    """Send whatever the user needs to see next. Never changes state."""
    state = user.state
    if state is OnboardingState.UNVERIFIED:
        send_verification_prompt(tg, user.user_id, reminder=reminder)
    elif state is OnboardingState.VERIFIED_NO_LANGUAGE:
        send_language_prompt(tg, user.user_id, settings)
    else:
        tg.send_text(user.user_id, WELCOME)


def handle_start(db: Session, tg: TelegramClient, tg_user: TgUser, settings: Settings) -> User:
    user = users.upsert_user(db, tg_user)
    if user.is_blocked:
        log.info("start from blocked user %s ignored", user.user_id)
        return user
    prompt_for_state(tg, user, settings)
    return user


def handle_verify(db: Session, tg: TelegramClient, query: TgCallbackQuery, settings: Settings) -> User:
    user = users.upsert_user(db, query.from_user)
    if user.is_blocked:
        return user

    flipped = users.mark_verified(db, user.user_id)
    db.refresh(user)

    if not flipped:
        # replayed button press: nothing to change
        _ack(tg.answer_callback, query.id, "Already verified")
        if user.state is OnboardingState.VERIFIED_NO_LANGUAGE:
            send_language_prompt(tg, user.user_id, settings)
        return user

    log.info("user %s verified", user.user_id)
    _ack(tg.answer_callback, query.id, "Verified!")
    if query.message is not None:
        _ack(
            tg.edit_text,
            user.user_id,
            query.message.message_id,
            "✅ Verified successfully. Now please select your language.",
        )
    if user.state is OnboardingState.VERIFIED_NO_LANGUAGE:
        send_language_prompt(tg, user.user_id, settings)
    return user


def handle_select_language(
    db: Session, tg: TelegramClient, query: TgCallbackQuery, code: str, settings: Settings
) -> User:
    user = users.upsert_user(db, query.from_user)
    if user.is_blocked:
        return user

    if user.state is OnboardingState.UNVERIFIED:
        _ack(tg.answer_callback, query.id, "Please verify first")
        send_verification_prompt(tg, user.user_id, reminder=True)
        return user

    if code not in settings.languages:
        log.info("user %s picked unsupported language %r", user.user_id, code)
        _ack(tg.answer_callback, query.id, "Unsupported language")
        return user

    users.set_language(db, user, code)
    log.info("user %s language set to %s", user.user_id, code)

    _ack(tg.answer_callback, query.id, f"Language set to {code}")
    if query.message is not None:
        _ack(
            tg.edit_text,
            user.user_id,
            query.message.message_id,
            f"✅ Language set to {settings.languages.display_name(code)}. You can now send messages.",
        )
    return user


def handle_callback(db: Session, tg: TelegramClient, query: TgCallbackQuery, settings: Settings) -> None:
    data = query.data or ""
    if data == VERIFY_CALLBACK:
        handle_verify(db, tg, query, settings)
    elif data.startswith(LANG_CALLBACK_PREFIX):
        handle_select_language(db, tg, query, data[len(LANG_CALLBACK_PREFIX):], settings)
    else:
        log.debug("unknown callback data %r from %s", data, query.from_user.id)
        _ack(tg.answer_callback, query.id)
