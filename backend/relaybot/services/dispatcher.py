from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from relaybot.core.config import Settings
from relaybot.models.enums import OnboardingState
from relaybot.schemas.telegram import TgMessage, Update
from relaybot.services import onboarding, relay, users
from relaybot.services.admin_replies import handle_admin_message
from relaybot.services.correlator import DuplicateCorrelationKey
from relaybot.services.telegram_api import TelegramApiError, TelegramClient
from relaybot.services.translator import Translator

log = logging.getLogger("relaybot.dispatcher")


class MalformedEvent(Exception):
    pass


def parse_update(payload: Any) -> Update:
    try:
        return Update.model_validate(payload)
    except ValidationError as e:
        raise MalformedEvent(str(e)) from e


def _is_start(message: TgMessage) -> bool:
    return (message.text or "").startswith("/start")


def handle_guest_message(
    db: Session,
    tg: TelegramClient,
    translator: Translator,
    message: TgMessage,
    settings: Settings,
) -> None:
    user = users.upsert_user(db, message.from_user)
    if user.is_blocked:
        log.debug("message from blocked user %s dropped", user.user_id)
        return

    if user.state is not OnboardingState.READY:
        onboarding.prompt_for_state(tg, user, settings, reminder=True)
        return

    relay.relay_guest_message(db, tg, translator, message, user, settings)


def _route(db: Session, tg: TelegramClient, translator: Translator, update: Update, settings: Settings) -> None:
    if update.message is not None:
        message = update.message
        if message.from_user is None or message.chat.type != "private":
            log.debug("update %s: not a private user message, ignored", update.update_id)
            return
        if message.from_user.id == settings.ADMIN_TG_USER_ID:
            handle_admin_message(db, tg, message, settings)
        elif _is_start(message):
            onboarding.handle_start(db, tg, message.from_user, settings)
        else:
            handle_guest_message(db, tg, translator, message, settings)
        return

    if update.callback_query is not None:
        onboarding.handle_callback(db, tg, update.callback_query, settings)
        return

    log.debug("update %s has no supported payload, ignored", update.update_id)


def dispatch_update(
    db: Session,
    payload: Any,
    *,
    tg: TelegramClient,
    translator: Translator,
    settings: Settings,
) -> None:
    """Process one webhook update as an isolated unit of work.

    Platform failures end the unit quietly. Database failures roll back and
    propagate so the caller can answer non-2xx and Telegram redelivers.
    """
    try:
        update = parse_update(payload)
    except MalformedEvent as e:
        log.warning("malformed update dropped: %s", e)
        return

    try:
        _route(db, tg, translator, update, settings)
    except TelegramApiError as e:
        log.warning("update %s: telegram call failed: %s", update.update_id, e)
    except DuplicateCorrelationKey:
        log.exception("update %s: correlation key collision", update.update_id)
    except SQLAlchemyError:
        db.rollback()
        log.exception("update %s: persistence failure", update.update_id)
        raise
