from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from relaybot.core.config import Settings, settings
from relaybot.core.db import get_db
from relaybot.services.dispatcher import dispatch_update
from relaybot.services.telegram_api import TelegramClient
from relaybot.services.translator import Translator

log = logging.getLogger("relaybot.webhook")

router = APIRouter(tags=["webhook"])

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def get_settings() -> Settings:
    return settings


def get_telegram_client(cfg: Settings = Depends(get_settings)) -> TelegramClient:
    return TelegramClient(cfg.TG_BOT_TOKEN, api_base=cfg.TELEGRAM_API_BASE, timeout=cfg.TELEGRAM_TIMEOUT_SECONDS)


def get_translator(cfg: Settings = Depends(get_settings)) -> Translator:
    return Translator(
        cfg.TRANSLATION_API_KEY,
        api_url=cfg.TRANSLATION_API_URL,
        model=cfg.TRANSLATION_MODEL,
        timeout=cfg.TRANSLATION_TIMEOUT_SECONDS,
    )


@router.post("/webhook", response_class=PlainTextResponse)
async def telegram_webhook(
    request: Request,
    db: Session = Depends(get_db),
    tg: TelegramClient = Depends(get_telegram_client),
    translator: Translator = Depends(get_translator),
    cfg: Settings = Depends(get_settings),
):
    got = request.headers.get(SECRET_HEADER, "")
    if cfg.TELEGRAM_WEBHOOK_SECRET and not hmac.compare_digest(got, cfg.TELEGRAM_WEBHOOK_SECRET):
        raise HTTPException(status_code=403, detail="Unauthorized")

    try:
        payload = await request.json()
    except ValueError:
        log.warning("webhook body is not JSON, dropped")
        return "OK"

    try:
        await run_in_threadpool(dispatch_update, db, payload, tg=tg, translator=translator, settings=cfg)
    except SQLAlchemyError:
        # non-2xx makes Telegram redeliver the update later
        raise HTTPException(status_code=500, detail="storage unavailable")
    return "OK"
