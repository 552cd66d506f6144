"""Gateway: Ollama LLM client — implements LLMClient port."""

from __future__ import annotations

import logging

import ollama as ollama_sync

log = logging.getLogger('vr.llm')


class OllamaLLMClient:
    """Wraps ollama.AsyncClient to implement the LLMClient protocol."""

    def __init__(self, host: str = 'http://localhost:11434') -> None:
        self._host = host

    async def chat_single(self, model: str, prompt: str) -> str:
        client = ollama_sync.AsyncClient(host=self._host)
        resp = await client.chat(
            model=model,
            messages=[{'role': 'user', 'content': prompt}],
        )
        content = resp.message.content or ''
        log.debug('chat_single(%s) -> %d chars', model, len(content))
        return content

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            client = ollama_sync.Client(host=self._host)
            client.list()
            return True, ''
        except Exception as e:
            return False, f'Cannot connect to Ollama at {self._host}: {e}'
