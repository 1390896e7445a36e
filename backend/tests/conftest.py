from __future__ import annotations

import os
import tempfile

# Settings are read at import time, so the environment must be ready first.
_TMP_DIR = tempfile.mkdtemp(prefix="relaybot-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/relaybot.db")
os.environ.setdefault("TG_BOT_TOKEN", "123456:TEST")
os.environ.setdefault("ADMIN_TG_USER_ID", "999")
os.environ.setdefault("TELEGRAM_WEBHOOK_SECRET", "")
os.environ.setdefault("TRANSLATION_API_KEY", "")

import pytest  # noqa: E402

from relaybot.core.config import Settings  # noqa: E402
from relaybot.core.db import Base, SessionLocal, engine  # noqa: E402
from tests.testkit import ADMIN_ID, FakeTelegram, FakeTranslator  # noqa: E402


@pytest.fixture()
def db():
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture()
def settings() -> Settings:
    return Settings(ADMIN_TG_USER_ID=ADMIN_ID, ADMIN_LANGUAGE="zh", TELEGRAM_WEBHOOK_SECRET="")


@pytest.fixture()
def tg() -> FakeTelegram:
    return FakeTelegram()


@pytest.fixture()
def translator() -> FakeTranslator:
    return FakeTranslator()
