"""Unit tests for the chat client wrapper."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from listradar.llm import LLMClient, LLMClientError, extract_balanced


def _resp(content: object) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestLLMClient:
    def test_missing_key(self) -> None:
        with pytest.raises(LLMClientError, match="LLM_API_KEY"):
            LLMClient(provider="openai", api_key="")

    def test_unknown_provider(self) -> None:
        with pytest.raises(LLMClientError, match="Unknown LLM_PROVIDER"):
            LLMClient(provider="carrier-pigeon", api_key="k")

    def test_complete_sends_system_and_user(self) -> None:
        client = LLMClient(provider="openai", api_key="k")
        client._client = MagicMock()
        client._client.chat.completions.create.return_value = _resp('{"relevanceScore": 1}')

        text = client.complete(model="m", system="sys", user="usr", max_tokens=64)

        assert text == '{"relevanceScore": 1}'
        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["max_tokens"] == 64
        assert kwargs["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "usr"},
        ]


class TestFirstText:
    def test_text_choice(self) -> None:
        assert LLMClient._first_text(_resp("hello")) == "hello"

    def test_no_choices(self) -> None:
        assert LLMClient._first_text(SimpleNamespace(choices=[])) == ""

    def test_non_text_content(self) -> None:
        assert LLMClient._first_text(_resp(None)) == ""


class TestExtractBalanced:
    def test_object(self) -> None:
        assert extract_balanced('x {"a": {"b": 1}} y', "{", "}") == '{"a": {"b": 1}}'

    def test_array_with_brackets_in_strings(self) -> None:
        text = 'links: [{"title": "part [2", "url": "u"}] trailing ]'
        assert extract_balanced(text, "[", "]") == '[{"title": "part [2", "url": "u"}]'

    def test_escaped_quote_inside_string(self) -> None:
        text = '["say \\"]\\" twice"]'
        assert extract_balanced(text, "[", "]") == text

    def test_missing_or_unclosed(self) -> None:
        assert extract_balanced("no json", "{", "}") is None
        assert extract_balanced("[unclosed", "[", "]") is None
