from __future__ import annotations
import asyncio
import os
from typing import Any, Dict, List, Optional
import google.generativeai as genai
from unbind.utils.config import AppConfig
from unbind.utils.logger import logger

ChatMessage = Dict[str, str]

_ROLE_MAP = {"user": "user", "assistant": "model", "model": "model"}


def to_gemini_request(messages: List[ChatMessage]) -> tuple[Optional[str], List[Dict[str, Any]]]:
    """Split role-tagged chat messages into a system instruction and Gemini contents."""
    system_parts: List[str] = []
    contents: List[Dict[str, Any]] = []
    for msg in messages:
        role = msg.get("role", "user")
        if role == "system":
            system_parts.append(msg["content"])
            continue
        contents.append({"role": _ROLE_MAP.get(role, "user"), "parts": [msg["content"]]})
    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


class GeminiClient:
    """Chat-completion adapter over google-generativeai.

    A single call, no retries: callers decide whether a failure is absorbed or raised.
    """

    def __init__(self, config: AppConfig):
        api_key = os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ValueError("GOOGLE_API_KEY not set")
        genai.configure(api_key=api_key)
        self.config = config

    async def complete(
        self,
        messages: List[ChatMessage],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        json_output: bool = False,
    ) -> str:
        system_instruction, contents = to_gemini_request(messages)
        generative_model = genai.GenerativeModel(
            model or self.config.chat_model,
            system_instruction=system_instruction,
        )
        generation_config: Dict[str, Any] = {
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_output_tokens": self.config.max_tokens,
        }
        if json_output:
            generation_config["response_mime_type"] = "application/json"
        call = generative_model.generate_content_async(contents, generation_config=generation_config)
        if self.config.llm_timeout and self.config.llm_timeout > 0:
            rsp = await asyncio.wait_for(call, timeout=self.config.llm_timeout)
        else:
            rsp = await call
        logger.debug("Gemini %s returned %s chars", model or self.config.chat_model, len(rsp.text or ""))
        return rsp.text
