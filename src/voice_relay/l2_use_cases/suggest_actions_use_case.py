"""Use case: suggest follow-up actions for a finished transcript."""

from __future__ import annotations

import logging

from voice_relay.l2_use_cases.ports.llm_client import LLMClient
from voice_relay.l2_use_cases.utils.action_parser import parse_actions
from voice_relay.l2_use_cases.utils.prompt_builder import build_actions_prompt

log = logging.getLogger('vr.llm')

DEFAULT_ACTIONS = ['Tell me more', 'Explain this', 'Summarize', 'Related topics']


class SuggestActionsUseCase:
    """Best-effort: failures degrade to DEFAULT_ACTIONS instead of raising."""

    def __init__(self, llm_client: LLMClient) -> None:
        self._llm = llm_client

    async def execute(self, transcript: str, model: str) -> list[str]:
        if not transcript.strip():
            return []
        try:
            raw = await self._llm.chat_single(model=model, prompt=build_actions_prompt(transcript))
        except Exception as e:  # noqa: BLE001 -- suggestions are optional; transcript already delivered
            log.warning('Action suggestion failed: %s', e)
            return list(DEFAULT_ACTIONS)
        return parse_actions(raw)
