"""Pure functions for building LLM prompts."""

from __future__ import annotations

ACTION_COUNT = 4

TRANSCRIBE_ONLY_INSTRUCTION = 'Transcribe the audio to text strictly. Do not add descriptions.'


def build_actions_prompt(transcript: str, *, count: int = ACTION_COUNT) -> str:
    """Build the single-turn prompt asking for follow-up actions on *transcript*."""
    return (
        'You are a helpful AI assistant. The user has just spoken the following text: '
        f'"{transcript.strip()}".\n'
        f'Based on this, suggest exactly {count} distinct, short, and relevant follow-up actions '
        'or questions the user might want to ask or do next.\n'
        'Return ONLY a raw JSON array of strings, for example: '
        '["Action 1", "Action 2", "Action 3", "Action 4"].\n'
        'Do not include markdown formatting like markdown code blocks.'
    )
