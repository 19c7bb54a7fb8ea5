"""Google Gemini generation backend."""

from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai
import structlog
from google.api_core import exceptions

from ...config import DEFAULT_SYSTEM_PROMPT
from ...domain.errors import ProviderError
from ...domain.models import Message
from .base import TRUNCATION_NOTE, GenerationAdapter

logger = structlog.get_logger()

PLACEHOLDER_KEY = "TU_API_KEY_DE_GEMINI"

SYSTEM_ACKNOWLEDGEMENT = (
    "Understood. I am your virtual assistant specialized in technology and "
    "programming. I will help you clearly and professionally. How can I assist you?"
)

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


class GeminiGenerationAdapter(GenerationAdapter):
    """Gemini ``generate_content`` with the system prompt primed as a first turn.

    Gemini has no system role in the contents list, so the prompt is sent as a
    user turn followed by a canned model acknowledgement.
    """

    provider_name = "gemini"
    assistant_role = "model"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-1.5-flash",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
        model: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.system_prompt = system_prompt
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature

        if model is None and self.is_configured():
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self.model = model
        logger.info("gemini_adapter_init", model=model_name, configured=self.is_configured())

    def to_provider_format(self, history: Sequence[Message]) -> List[Dict[str, Any]]:
        return [self._content(self.provider_role(m.role), m.content) for m in history]

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key != PLACEHOLDER_KEY and self.model_name)

    def build_contents(self, text: str, provider_history: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        contents = [
            self._content(self.user_role, self.system_prompt),
            self._content(self.assistant_role, SYSTEM_ACKNOWLEDGEMENT),
        ]
        contents.extend(provider_history)
        contents.append(self._content(self.user_role, text))
        return contents

    async def send(self, text: str, provider_history: Sequence[Any]) -> str:
        if not self.is_configured() or self.model is None:
            logger.error("gemini_not_configured")
            raise ProviderError(
                "Gemini API Key is not configured. Set CHAT_GEMINI_API_KEY."
            )

        contents = self.build_contents(text, provider_history)
        try:
            response = await self.model.generate_content_async(
                contents,
                generation_config={
                    "max_output_tokens": self.max_output_tokens,
                    "temperature": self.temperature,
                },
                safety_settings=SAFETY_SETTINGS,
            )
        except exceptions.InvalidArgument as e:
            raise self._mapped("Invalid request to Gemini. Check the configuration.", 400, e) from e
        except (exceptions.PermissionDenied, exceptions.Unauthenticated) as e:
            raise self._mapped("Invalid or unauthorized Gemini API key.", 403, e) from e
        except exceptions.ResourceExhausted as e:
            logger.warning("gemini_quota_exhausted")
            raise self._mapped("You have exceeded the request limit. Please try again later.", 429, e) from e
        except exceptions.InternalServerError as e:
            raise self._mapped("Gemini server error. Please try again later.", 500, e) from e
        except exceptions.GoogleAPIError as e:
            raise self._mapped(getattr(e, "message", None) or "Error connecting to Gemini", None, e) from e

        return self._extract_reply(response)

    def _mapped(self, message: str, status: Optional[int], cause: Exception) -> ProviderError:
        logger.error("gemini_request_error", status=status, error=str(cause))
        return ProviderError(message, status_code=status)

    def _extract_reply(self, response: Any) -> str:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            raise ProviderError("Gemini response does not have the expected format")

        candidate = candidates[0]
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None)
        if not parts or not getattr(parts[0], "text", None):
            raise ProviderError("Gemini response does not contain valid content parts")

        reply = parts[0].text
        reason = getattr(candidate, "finish_reason", None)
        if getattr(reason, "name", reason) == "MAX_TOKENS":
            reply += TRUNCATION_NOTE
        return reply

    @staticmethod
    def _content(role: str, text: str) -> Dict[str, Any]:
        return {"role": role, "parts": [{"text": text}]}
