"""Gateway: OpenAI-compatible LLM client — implements LLMClient port.

Works with any OpenAI-compatible API: OpenAI, OpenRouter, Gemini's compatibility endpoint, vLLM, etc.
"""

from __future__ import annotations

import logging

import openai

log = logging.getLogger('vr.llm')

GEMINI_OPENAI_BASE_URL = 'https://generativelanguage.googleapis.com/v1beta/openai/'


class OpenAICompatLLMClient:
    """Wraps openai.AsyncOpenAI to implement the LLMClient protocol."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = 'https://api.openai.com/v1',
        default_headers: dict[str, str] | None = None,
        temperature: float = 0.7,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._default_headers = default_headers
        self._temperature = temperature

    async def chat_single(self, model: str, prompt: str) -> str:
        client = openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            default_headers=self._default_headers,
        )
        resp = await client.chat.completions.create(
            model=model,
            messages=[{'role': 'user', 'content': prompt}],
            temperature=self._temperature,
        )
        content = (resp.choices[0].message.content or '') if resp.choices else ''
        log.debug('chat_single(%s) -> %d chars', model, len(content))
        return content

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = openai.OpenAI(api_key=self._api_key, base_url=self._base_url)
            client.models.list()
            return True, ''
        except openai.AuthenticationError as e:
            return False, f'Authentication failed: {e}'
        except Exception as e:
            return False, f'Cannot connect to OpenAI-compatible API: {e}'
