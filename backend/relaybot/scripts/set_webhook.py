"""Point the bot's webhook at this deployment.

Env:
  - TG_BOT_TOKEN
  - PUBLIC_BASE_URL, e.g. https://relay.example.com (the /webhook path is appended)
  - TELEGRAM_WEBHOOK_SECRET (optional, sent back by Telegram in every update)
"""

from __future__ import annotations

import sys

from relaybot.core.config import settings
from relaybot.services.telegram_api import TelegramApiError, TelegramClient


def webhook_url(base_url: str) -> str:
    return base_url.rstrip("/") + "/webhook"


def main() -> int:
    if not settings.PUBLIC_BASE_URL:
        print("PUBLIC_BASE_URL is not configured", file=sys.stderr)
        return 1

    tg = TelegramClient(settings.TG_BOT_TOKEN, api_base=settings.TELEGRAM_API_BASE)
    url = webhook_url(settings.PUBLIC_BASE_URL)
    try:
        tg.set_webhook(url, secret_token=settings.TELEGRAM_WEBHOOK_SECRET or None)
    except TelegramApiError as e:
        print(f"setWebhook failed: {e}", file=sys.stderr)
        return 1
    print(f"webhook set to {url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
