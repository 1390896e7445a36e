from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from relaybot.core.languages import LanguageTable


@lru_cache(maxsize=None)
def _language_table(items: tuple[tuple[str, str], ...]) -> LanguageTable:
    return LanguageTable.from_mapping(dict(items))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    database_url: str

    # Telegram Bot API
    TG_BOT_TOKEN: str
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT_SECONDS: int = 10
    # Compared against X-Telegram-Bot-Api-Secret-Token, empty = no check
    TELEGRAM_WEBHOOK_SECRET: str = ""
    PUBLIC_BASE_URL: str = ""

    # The single operator who receives relayed traffic
    ADMIN_TG_USER_ID: int
    ADMIN_LANGUAGE: str = "zh"

    # Declared for compatibility, not applied: guests must pick a language.
    DEFAULT_LANGUAGE: str = "en"
    # Order matters: the language keyboard is rendered in this order.
    SUPPORTED_LANGUAGES: dict[str, str] = {
        "zh": "Chinese",
        "en": "English",
        "ja": "Japanese",
        "ru": "Russian",
    }

    # Translation (OpenAI-compatible chat completions). No key = no translation.
    TRANSLATION_API_KEY: str = ""
    TRANSLATION_API_URL: str = "https://api.siliconflow.cn/v1/chat/completions"
    TRANSLATION_MODEL: str = "deepseek-ai/DeepSeek-V3"
    TRANSLATION_TIMEOUT_SECONDS: int = 15

    # 0 disables pruning of message mappings
    MESSAGE_RETENTION_DAYS: int = 90

    LOG_LEVEL: str = "INFO"

    @property
    def languages(self) -> LanguageTable:
        return _language_table(tuple(self.SUPPORTED_LANGUAGES.items()))

    def admin_language_name(self) -> str:
        return self.languages.display_name(self.ADMIN_LANGUAGE)


settings = Settings()
