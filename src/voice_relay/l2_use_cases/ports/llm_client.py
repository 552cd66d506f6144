"""Port: LLM chat client."""

from __future__ import annotations

from typing import Protocol


class LLMClient(Protocol):
    """Abstract LLM client. Zero framework types leak through."""

    async def chat_single(self, model: str, prompt: str) -> str:
        """Single-turn chat. Returns raw text."""
        ...

    def check_connectivity(self) -> tuple[bool, str]:
        """Pre-flight connectivity check. Returns (ok, error_message)."""
        ...
