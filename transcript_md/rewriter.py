from __future__ import annotations

import logging

from .openrouter_client import OpenRouterClient

logger = logging.getLogger(__name__)


class TranscriptRewriter:
    """Turns a raw transcript into markdown with one chat completion."""

    def __init__(self, client: OpenRouterClient, system_prompt: str):
        if not system_prompt or not system_prompt.strip():
            raise ValueError("System prompt must not be empty.")
        self.client = client
        self.system_prompt = system_prompt

    def build_messages(self, text: str) -> list[dict]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": text},
        ]

    def rewrite(self, text: str) -> str:
        # Blank transcripts are sent as-is; the completion is returned untouched.
        if not text.strip():
            logger.warning("Transcript is blank; sending it unchanged")
        return self.client.chat_completion(self.build_messages(text))

    __call__ = rewrite
