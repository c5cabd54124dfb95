"""
Exchange with the text-classification provider (Claude).

The provider is asked for strict JSON; whatever comes back is handed to the
normalizer as raw candidates, so a partially valid reply still yields tasks.
"""
import json
import logging

import anthropic

from models import Task
from normalizer import sanitize_tasks
from prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """The provider failed or returned something that is not JSON."""


def strip_code_fence(text: str) -> str:
    """Strip a markdown code block wrapped around the reply, if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]  # ```json
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def parse_candidates(ai_text: str) -> list:
    """Pull the raw ``tasks`` array out of a provider reply."""
    try:
        parsed = json.loads(strip_code_fence(ai_text))
    except json.JSONDecodeError as e:
        raise AnalysisError("Failed to parse AI response") from e

    if not isinstance(parsed, dict):
        return []
    tasks = parsed.get("tasks")
    return tasks if isinstance(tasks, list) else []


async def analyze_with_claude(
    text: str,
    client: anthropic.AsyncAnthropic,
    model: str,
    max_tokens: int = 1024,
) -> list[Task]:
    """Ask Claude to split ``text`` into tasks and return them normalized."""
    try:
        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=0.2,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_user_prompt(text)}],
        )
    except anthropic.APIError as e:
        logger.warning("Claude request failed: %s", e)
        raise AnalysisError(f"API error: {e}") from e

    ai_text = "".join(getattr(block, "text", "") for block in response.content or [])
    logger.debug("Claude response: %s", ai_text)

    if not ai_text.strip():
        raise AnalysisError("Empty AI response.")

    return sanitize_tasks(parse_candidates(ai_text))
