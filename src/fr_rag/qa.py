from __future__ import annotations

import logging
from typing import Callable

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

GenerateFn = Callable[[str], "str | None"]


def generate_answer(prompt: str, model: str = "gpt-4.1-mini", temperature: float = 0.0) -> str | None:
    """Send a fully built prompt to the chat model.

    Returns:
        The model's text, or `None` when the call fails or comes back empty.
        The prompt itself is never returned in place of an answer.
    """
    client = OpenAI()
    try:
        response = client.responses.create(model=model, input=prompt, temperature=temperature)
    except OpenAIError as exc:
        logger.warning("Model call failed: %s: %s", type(exc).__name__, exc)
        return None

    text = response.output_text
    if not text or not text.strip():
        logger.warning("Model returned an empty response")
        return None
    return text


def make_generator(model: str = "gpt-4.1-mini", temperature: float = 0.0) -> GenerateFn:
    def generate(prompt: str) -> str | None:
        return generate_answer(prompt, model=model, temperature=temperature)

    return generate
