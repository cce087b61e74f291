"""Provider-agnostic chat client — one system prompt, one user message, raw text back."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from openai import OpenAI

from listradar import config

logger = logging.getLogger(__name__)


class LLMClientError(Exception):
    """Raised when the LLM client cannot be constructed."""


def extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
    """First balanced ``open_char ... close_char`` span in model output.

    Delimiters inside JSON string literals are skipped, so a title like
    ``"Part [2"`` does not throw off the depth count. Returns ``None`` when
    *text* has no *open_char* or the span never closes.
    """
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


class ChatClient(Protocol):
    def complete(self, model: str, system: str, user: str, max_tokens: int = 512) -> str: ...


class LLMClient:
    """Thin wrapper over the provider SDK. Ships with OpenAI."""

    def __init__(self, provider: str, api_key: str) -> None:
        self._provider = provider.lower()
        self._client: Any = None

        if not api_key:
            raise LLMClientError("LLM_API_KEY is required but was empty.")

        if self._provider == "openai":
            self._client = OpenAI(api_key=api_key)
        else:
            raise LLMClientError(f"Unknown LLM_PROVIDER '{provider}'.")

    @classmethod
    def from_env(cls) -> LLMClient:
        return cls(provider=config.LLM_PROVIDER, api_key=config.LLM_API_KEY)

    # ── public ──────────────────────────────────────────────────────────

    def complete(self, model: str, system: str, user: str, max_tokens: int = 512) -> str:
        """Send a chat-completion request and return the first text choice ("" if none)."""
        logger.debug("LLM request model=%s (%d chars)", model, len(user))
        resp = self._client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_tokens=max_tokens,
        )
        return self._first_text(resp)

    # ── private ─────────────────────────────────────────────────────────

    @staticmethod
    def _first_text(resp: Any) -> str:
        choices = getattr(resp, "choices", None) or []
        if not choices:
            return ""
        content = getattr(choices[0].message, "content", None)
        return content if isinstance(content, str) else ""
