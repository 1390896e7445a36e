import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from relaybot.core.config import settings
from relaybot.routers import webhook

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Relay Bot")

app.include_router(webhook.router)


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Telegram relay bot is running!"


@app.get("/health")
def health():
    return {"status": "ok"}
