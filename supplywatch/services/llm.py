# supplywatch/services/llm.py

import logging
from typing import Protocol

from openai import OpenAI

logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    def complete(self, system: str, prompt: str, max_tokens: int) -> str | None:
        ...


class OpenAIChatClient:
    """OpenAI Chat-Completions; liefert den getrimmten Antworttext oder None."""

    def __init__(self, api_key: str | None, model: str = "gpt-4o-mini", timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client: OpenAI | None = None

    @property
    def client(self) -> OpenAI:
        # erst beim ersten Aufruf bauen: OpenAI() wirft ohne API-Key
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def complete(self, system: str, prompt: str, max_tokens: int) -> str | None:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
        )
        if not completion.choices:
            return None
        content = completion.choices[0].message.content
        logger.debug("[LLM] %s -> %r", self.model, content)
        return content.strip() if content else None
