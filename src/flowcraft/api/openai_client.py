"""Azure OpenAI client used for flowchart generation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from openai import AzureOpenAI

from ..config.settings import Settings
from ..utils.logging import get_logger

logger = get_logger(__name__)


class AzureOpenAIClient:
    """Single-shot chat completions returning the reply text."""

    def __init__(self, settings: Settings):
        settings.require_llm()
        self.settings = settings
        self._client = AzureOpenAI(
            api_version=settings.api_version,
            azure_endpoint=settings.endpoint,
            api_key=settings.api_key,
        )

    @classmethod
    def from_env(cls) -> "AzureOpenAIClient":
        """Client configured from the process environment after loading `.env`."""
        load_dotenv()
        return cls(Settings())

    def complete(
        self,
        *,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = True,
    ) -> str:
        messages: List[Dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {
            "model": self.settings.deployment_name,
            "messages": messages,
            "temperature": (
                self.settings.temperature if temperature is None else temperature
            ),
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        limit = max_tokens or self.settings.max_tokens

        try:
            resp = self._client.chat.completions.create(max_completion_tokens=limit, **kwargs)
        except TypeError:
            # Fallback for older SDKs/models.
            resp = self._client.chat.completions.create(max_tokens=limit, **kwargs)

        usage = getattr(resp, "usage", None)
        if usage is not None:
            logger.info(
                "LLM request complete",
                extra={
                    "prompt_tokens": getattr(usage, "prompt_tokens", None),
                    "completion_tokens": getattr(usage, "completion_tokens", None),
                },
            )
        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""
