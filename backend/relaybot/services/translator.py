from __future__ import annotations

import json
import logging
import urllib.request

log = logging.getLogger("relaybot.translator")


class Translator:
    """Best-effort translation through an OpenAI-compatible chat completions API.

    Never raises: without an API key, or on any failure, the input is returned unchanged.
    """

    def __init__(self, api_key: str | None, *, api_url: str, model: str, timeout: float = 15):
        self.api_key = api_key or ""
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def translate(self, text: str, target_language: str) -> str:
        if not self.enabled or not text:
            return text

        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "system",
                    "content": f"Translate the following text to {target_language}. Only return the translated text.",
                },
                {"role": "user", "content": text},
            ],
        }
        req = urllib.request.Request(
            self.api_url,
            data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read().decode("utf-8", errors="ignore")
            js = json.loads(body) if body else {}
            translated = js["choices"][0]["message"]["content"]
        except Exception as e:
            log.warning("translation failed, keeping original text: %s", e)
            return text

        translated = (translated or "").strip()
        return translated or text
