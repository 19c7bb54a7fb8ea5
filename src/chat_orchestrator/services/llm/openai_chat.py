"""OpenAI chat-completions backend over httpx."""

from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from ...config import DEFAULT_SYSTEM_PROMPT
from ...domain.errors import ProviderError
from ...domain.models import Message
from .base import TRUNCATION_NOTE, GenerationAdapter

logger = structlog.get_logger()

PLACEHOLDER_KEY = "TU_API_KEY_DE_OPENAI"

STATUS_MESSAGES = {
    400: "Invalid request to OpenAI. Check the configuration.",
    401: "Invalid or unauthorized OpenAI API key.",
    429: "You have exceeded the request limit. Please try again later.",
    500: "OpenAI server error. Please try again later.",
}


class OpenAIGenerationAdapter(GenerationAdapter):
    """Chat completions with a system prompt prepended to the history."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-4o-mini",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int = 800,
        temperature: float = 0.7,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._client = client
        logger.info("openai_adapter_init", model=model, configured=self.is_configured())

    def to_provider_format(self, history: Sequence[Message]) -> List[Dict[str, str]]:
        return [
            {"role": self.provider_role(m.role), "content": m.content} for m in history
        ]

    def is_configured(self) -> bool:
        return bool(
            self.api_key
            and self.api_key != PLACEHOLDER_KEY
            and self.api_url
            and self.model
        )

    def build_payload(self, text: str, provider_history: Sequence[Dict[str, str]]) -> Dict[str, Any]:
        messages = [{"role": "system", "content": self.system_prompt}]
        messages.extend(provider_history)
        messages.append({"role": "user", "content": text})
        return {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    async def send(self, text: str, provider_history: Sequence[Any]) -> str:
        if not self.is_configured():
            logger.error("openai_not_configured")
            raise ProviderError(
                "OpenAI API Key is not configured. Set CHAT_OPENAI_API_KEY."
            )

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = self.build_payload(text, provider_history)

        try:
            if self._client is not None:
                response = await self._client.post(self.api_url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("openai_request_error", error=str(e))
            raise ProviderError("Error connecting to OpenAI") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error("openai_error_response", status=response.status_code, error=message)
            raise ProviderError(message, status_code=response.status_code)

        return self._extract_reply(response)

    def _error_message(self, response: httpx.Response) -> str:
        if response.status_code in STATUS_MESSAGES:
            return STATUS_MESSAGES[response.status_code]
        try:
            detail = response.json().get("error", {}).get("message")
        except (ValueError, AttributeError):
            detail = None
        return detail or "Error connecting to OpenAI"

    def _extract_reply(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("OpenAI response does not have the expected format") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise ProviderError("OpenAI response does not have the expected format")

        choice = choices[0]
        content = (choice.get("message") or {}).get("content")
        if not content:
            raise ProviderError("OpenAI response does not contain valid message content")

        if choice.get("finish_reason") == "length":
            content += TRUNCATION_NOTE
        return content
