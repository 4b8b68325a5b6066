"""
Text-generation capability shared by every worker.

Each worker owns one ``TextGenerator`` configured with its role temperature.
The generator treats the chat model as a black box: instructions go in the
system message, the context payload in the human message, text comes back or
``GenerationError`` is raised.
"""

from __future__ import annotations

from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from stock_analyst.core.protocol import ConfigurationError, GenerationError
from stock_analyst.utils.config import Settings
from stock_analyst.utils.logging import get_logger

logger = get_logger(__name__)

_MAX_OUTPUT_TOKENS = 8192


class TextGenerator:
    """Async wrapper around a LangChain chat model."""

    def __init__(self, llm, role: str = "generic") -> None:
        self.llm = llm
        self.role = role

    async def generate(self, instructions: str, context: str) -> str:
        """
        Generate text for *context* under *instructions*.

        Raises
        ------
        GenerationError
            If the model call fails or returns empty content.
        """
        messages = [
            SystemMessage(content=instructions),
            HumanMessage(content=context),
        ]
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as exc:
            raise GenerationError(f"{self.role} generation failed: {exc}") from exc

        text = _content_to_text(getattr(response, "content", response))
        if not text.strip():
            raise GenerationError(f"{self.role} generation returned empty content")

        logger.debug("%s generated %d chars", self.role, len(text))
        return text.strip()


def _content_to_text(content) -> str:
    """Flatten LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


def build_text_generator(settings: Settings, role: str, temperature: Optional[float] = None) -> TextGenerator:
    """Return a ``TextGenerator`` for *role* backed by ChatOpenAI."""
    if not settings.openai_api_key:
        raise ConfigurationError(
            "OPENAI_API_KEY is not set. "
            "Add it to your environment or to a .env file in the project root."
        )
    llm = ChatOpenAI(
        model=settings.model,
        temperature=settings.temperature_for(role) if temperature is None else temperature,
        max_tokens=_MAX_OUTPUT_TOKENS,
        api_key=settings.openai_api_key,
    )
    return TextGenerator(llm, role=role)
