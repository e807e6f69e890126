import logging
from typing import Any, Dict, List, Optional, Union

from openai import AsyncOpenAI

from ..config import settings

logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None

def get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)
    return _client

MessageContent = Union[str, List[Dict[str, Any]]]

async def chat_completion_text(
    messages: List[Dict[str, MessageContent]],
    *,
    model: str,
    max_tokens: int,
    temperature: Optional[float] = None,
    top_p: Optional[float] = None,
) -> str:
    """
    Run one chat completion and return the first choice's text.

    Sampling parameters left as None are not sent. No retries: a failed call raises.
    """
    kwargs: Dict[str, Any] = {"model": model, "messages": messages, "max_tokens": max_tokens}
    if temperature is not None:
        kwargs["temperature"] = temperature
    if top_p is not None:
        kwargs["top_p"] = top_p

    response = await get_client().chat.completions.create(**kwargs)

    usage = getattr(response, "usage", None)
    if usage is not None:
        logger.info(
            "LLM token usage",
            extra={
                "model": model,
                "prompt_tokens": usage.prompt_tokens,
                "completion_tokens": usage.completion_tokens,
                "total_tokens": usage.total_tokens,
            },
        )
    else:
        logger.info("LLM returned no token usage info", extra={"model": model})

    if not response.choices:
        raise ValueError(f"Model {model} returned no choices")
    return response.choices[0].message.content or ""

async def complete_prompt(prompt: str, *, model: str, max_tokens: int, temperature: Optional[float] = None) -> str:
    """Single system-prompt completion, as used by the offline generators."""
    return await chat_completion_text(
        [{"role": "system", "content": prompt}],
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    )
