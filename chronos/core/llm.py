"""
Chronos — LLM Provider Abstraction.

`complete()` sends one CompletionRequest to whichever provider LLM_PROVIDER
names: gemini (default), anthropic, openai or cohere. The route is resolved
from settings on first use and cached for the life of the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    """One system-instructed, single-turn prompt."""

    system: str
    prompt: str
    max_tokens: int = 1024
    temperature: float = 0.8


# (api_key, model, request) -> reply text
_ProviderFn = Callable[[str, str, CompletionRequest], Awaitable[str]]


async def _complete_gemini(api_key: str, model: str, req: CompletionRequest) -> str:
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    gm = genai.GenerativeModel(model_name=model, system_instruction=req.system)
    config = genai.types.GenerationConfig(
        max_output_tokens=req.max_tokens,
        temperature=req.temperature,
    )
    response = await gm.generate_content_async(req.prompt, generation_config=config)
    return response.text


async def _complete_anthropic(api_key: str, model: str, req: CompletionRequest) -> str:
    import anthropic

    client = anthropic.AsyncAnthropic(api_key=api_key)
    response = await client.messages.create(
        model=model,
        max_tokens=req.max_tokens,
        # Anthropic caps temperature at 1.0
        temperature=min(req.temperature, 1.0),
        system=req.system,
        messages=[{"role": "user", "content": req.prompt}],
    )
    return response.content[0].text


def _chat_messages(req: CompletionRequest) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": req.system},
        {"role": "user", "content": req.prompt},
    ]


async def _complete_openai(api_key: str, model: str, req: CompletionRequest) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=api_key)
    response = await client.chat.completions.create(
        model=model,
        max_tokens=req.max_tokens,
        temperature=req.temperature,
        messages=_chat_messages(req),
    )
    return response.choices[0].message.content or ""


async def _complete_cohere(api_key: str, model: str, req: CompletionRequest) -> str:
    import cohere

    client = cohere.AsyncClientV2(api_key=api_key)
    response = await client.chat(
        model=model,
        max_tokens=req.max_tokens,
        temperature=req.temperature,
        messages=_chat_messages(req),
    )
    return response.message.content[0].text


# provider name -> (implementation, model used when LLM_MODEL is empty)
_PROVIDERS: dict[str, tuple[_ProviderFn, str]] = {
    "gemini":    (_complete_gemini,    "gemini-2.0-flash"),
    "anthropic": (_complete_anthropic, "claude-haiku-4-5-20251001"),
    "openai":    (_complete_openai,    "gpt-4o-mini"),
    "cohere":    (_complete_cohere,    "command-a-03-2025"),
}


@dataclass(frozen=True)
class _Route:
    """A resolved provider: where requests go and with which credentials."""

    provider: str
    fn: _ProviderFn
    model: str
    api_key: str


def _select_provider() -> _Route:
    """Resolve the route from settings; unknown provider names are an error."""
    from chronos.config import settings

    name = settings.LLM_PROVIDER.lower()
    try:
        fn, default_model = _PROVIDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown LLM_PROVIDER={name!r}. Supported: {', '.join(_PROVIDERS)}"
        ) from None

    route = _Route(name, fn, settings.LLM_MODEL or default_model, settings.LLM_API_KEY)
    logger.info("LLM provider: %s, model: %s", route.provider, route.model)
    return route


_route: _Route | None = None


async def complete(request: CompletionRequest) -> str:
    """Send `request` to the configured provider and return the reply text.

    Provider errors propagate; the advisor turns them into a fallback reply.
    """
    global _route

    if _route is None:
        _route = _select_provider()
    return await _route.fn(_route.api_key, _route.model, request)
