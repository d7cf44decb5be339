"""
Service copywriting IA - appels HTTP à l'API Messages d'Anthropic
"""

import re
import requests
from typing import Dict, Optional, Tuple
from datetime import datetime, timezone
import logging
from app.core.config import settings
from app.core.errors import CollaboratorError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 1024

SYSTEM_PROMPT = (
    "You are an expert copywriter helping creators shape a digital product idea. "
    "Answer in plain text, concise and concrete, without markdown formatting."
)


def strip_markdown(text: str) -> str:
    """Retire **gras**, *italique*, _italique_ et remplace les puces '*' en début de ligne par '•'"""
    text = re.sub(r"\*\*(.+?)\*\*", r"\1", text, flags=re.DOTALL)
    text = re.sub(r"^(\s*)\*\s+", r"\1• ", text, flags=re.MULTILINE)
    text = re.sub(r"\*(.+?)\*", r"\1", text)
    text = re.sub(r"(?<!\w)_(.+?)_(?!\w)", r"\1", text)
    return text.strip()


def _call_model(prompt: str, model: Optional[str] = None) -> Tuple[str, int, int]:
    if not settings.ANTHROPIC_API_KEY:
        raise CollaboratorError("ANTHROPIC_API_KEY is not configured")

    try:
        start_time = datetime.now(timezone.utc)

        response = requests.post(
            f"{settings.ANTHROPIC_BASE_URL}/v1/messages",
            headers={
                "x-api-key": settings.ANTHROPIC_API_KEY,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            json={
                "model": model or settings.ANTHROPIC_MODEL,
                "max_tokens": MAX_TOKENS,
                "system": SYSTEM_PROMPT,
                "messages": [{"role": "user", "content": prompt}],
            },
            timeout=settings.AI_REQUEST_TIMEOUT,
        )

        response.raise_for_status()
        data = response.json()

    except requests.RequestException as e:
        logger.error(f"Anthropic API error: {e}")
        raise CollaboratorError(f"AI request failed: {e}") from e

    text = "".join(part.get("text", "") for part in data.get("content", []) if part.get("type") == "text")
    usage = data.get("usage", {})
    tokens = usage.get("input_tokens", 0) + usage.get("output_tokens", 0)
    elapsed_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)

    return strip_markdown(text), tokens, elapsed_ms


def _format_answers(previous_answers: Dict[str, str]) -> str:
    return "\n".join(f"- {key}: {value}" for key, value in previous_answers.items() if value)


def improve_answer(question: str, answer: str, context: Optional[Dict[str, str]] = None) -> Tuple[str, int, int]:
    prompt = f"""Question: {question}

The creator answered:
{answer}

Rewrite this answer so it is clearer, more specific and more compelling. Keep the creator's intent."""

    if context:
        prompt += f"\n\nOther answers so far:\n{_format_answers(context)}"

    return _call_model(prompt)


def generate_optimal_answer(question: str, previous_answers: Optional[Dict[str, str]] = None) -> Tuple[str, int, int]:
    prompt = f"""Question: {question}

Write the best possible answer for this creator."""

    if previous_answers:
        prompt += f"\n\nWhat we know from their previous answers:\n{_format_answers(previous_answers)}"

    return _call_model(prompt)
