"""
clients/llm_client.py
---------------------
Async OpenAI chat-completions client.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from openai import AsyncOpenAI


class LLMClient:
    """Small facade over ``AsyncOpenAI.chat.completions``."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        if not api_key:
            raise ValueError("OPENAI_API_KEY must be set to use the chat endpoints")
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: int = 500,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        """
        Run one chat completion and return the assistant text ("" when empty).
        """
        kwargs: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            completion = await self.client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.debug(f"[OpenAI] ⚠️ chat completion failed: {e}")
            raise
        return completion.choices[0].message.content or ""
