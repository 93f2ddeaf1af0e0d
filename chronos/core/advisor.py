"""
Chronos — Advice Coach.

The only surface the chat feature needs from the task model:
`get_advice(prompt, tasks) -> text`. The current task list is embedded in
the system instruction as wire JSON; the model call itself lives in
chronos.core.llm.
"""

from __future__ import annotations

import json
import logging

from chronos.core.llm import CompletionRequest, complete
from chronos.data.models import Task

logger = logging.getLogger(__name__)

FALLBACK_EMPTY = "I'm sorry, I couldn't generate a response right now."
FALLBACK_ERROR = "Error connecting to the AI coach. Please try again later."
FALLBACK_DISABLED = "The AI coach is not configured. Set LLM_API_KEY to enable it."

RESET = "Context reset. How can we re-strategize?"

_SYSTEM_PROMPT = """\
You are an expert productivity coach and life strategist named Chronos AI.
You help users manage their daily routines, tasks, and habits with precision and empathy.

Current Task Data: {tasks_json}

RESPONSE GUIDELINES:
1. Be generous with space and structure.
2. Use Markdown: '###' for section headers, '**' for key actions, lists for steps.
3. Be actionable: give specific steps based on the current task list.
4. Keep a professional, encouraging and organized tone.
5. If the tasks mix Gaming, Workout and Work, advise on context switching and deep work.
"""


def build_system_prompt(tasks: list[Task]) -> str:
    tasks_json = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
    return _SYSTEM_PROMPT.format(tasks_json=tasks_json)


async def get_advice(
    prompt: str,
    tasks: list[Task],
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> str:
    """Ask the coach about the current tasks. Never raises.

    A blank prompt is not sent and yields an empty string.
    """
    from chronos.config import settings

    if not prompt.strip():
        return ""
    if not settings.advice_enabled:
        return FALLBACK_DISABLED

    request = CompletionRequest(
        system=build_system_prompt(tasks),
        prompt=prompt.strip(),
        max_tokens=max_tokens or settings.ADVICE_MAX_TOKENS,
        temperature=settings.ADVICE_TEMPERATURE if temperature is None else temperature,
    )

    try:
        text = await complete(request)
    except Exception as exc:
        logger.error("Advice request failed: %s", exc)
        return FALLBACK_ERROR

    if not text or not text.strip():
        logger.warning("Advice request returned an empty response")
        return FALLBACK_EMPTY
    return text
