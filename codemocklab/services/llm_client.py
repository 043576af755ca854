from typing import Optional

import requests

from ..core.config import Settings
from ..core.logger import get_logger
from ..utils.exceptions import (
    AIServiceUnavailableError,
    LLMError,
    LLMTimeoutError,
    UpstreamError,
)
from .prompt_builder import SYSTEM_PROMPT

logger = get_logger(__name__)


class DeepSeekClient:
    """Single-shot chat-completion client. No retries; callers decide."""

    def __init__(self, settings: Settings):
        if not settings.DEEPSEEK_API_KEY:
            if not settings.has_ai_service():
                raise AIServiceUnavailableError(
                    "No AI service configured. Please set DEEPSEEK_API_KEY, "
                    "OPENAI_API_KEY, or ANTHROPIC_API_KEY."
                )
            raise AIServiceUnavailableError(
                "DeepSeek API key not configured. Please set DEEPSEEK_API_KEY."
            )
        self.api_key = settings.DEEPSEEK_API_KEY
        self.api_url = settings.DEEPSEEK_API_URL
        self.model = settings.DEEPSEEK_MODEL
        self.default_timeout = settings.LLM_TIMEOUT_SECONDS

    def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: Optional[float] = None,
    ) -> str:
        timeout = timeout or self.default_timeout
        logger.info(
            f"DeepSeek call: temperature={temperature}, max_tokens={max_tokens}, "
            f"timeout={timeout}s, prompt={len(prompt)} chars"
        )
        logger.debug(f"Prompt excerpt: {prompt[:300]}")

        try:
            response = requests.post(
                self.api_url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                },
                timeout=timeout,
            )
        except requests.Timeout:
            logger.error(f"DeepSeek API call timed out after {timeout}s")
            raise LLMTimeoutError(f"DeepSeek API call timed out after {timeout}s")
        except requests.RequestException as e:
            logger.error(f"DeepSeek API request failed: {str(e)}")
            raise LLMError(f"DeepSeek API request failed: {str(e)}")

        if not response.ok:
            logger.error(
                f"DeepSeek API error response: {response.status_code} {response.text[:500]}"
            )
            raise UpstreamError(response.status_code, response.text)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(
                f"Malformed DeepSeek reply ({type(e).__name__}): {response.text[:500]}"
            )
            raise UpstreamError(response.status_code, response.text)

        if not isinstance(content, str) or not content.strip():
            logger.error(f"DeepSeek reply has no usable content: {content!r}")
            raise LLMError("DeepSeek API returned empty content")

        logger.info(f"DeepSeek response: {len(content)} chars")
        logger.debug(f"Response excerpt: {content[:500]}")
        return content
