"""
Text Generators - Pluggable clients for the narrative enrichment.

============================================================
PURPOSE
============================================================
A TextGenerator turns a prompt into free text. The engine
never depends on a concrete provider; the composition root
builds one and injects it.

Provides:
- TextGenerator protocol
- DeepSeekTextGenerator (OpenAI-compatible chat completions)

============================================================
FAILURE CONTRACT
============================================================
- non-2xx status, network error -> GenerationError
- non-JSON body or missing fields -> MalformedResponseError
- no retries; callers bound the call with their own timeout

============================================================
"""

import json
import logging
from typing import Any, Optional, Protocol

import aiohttp

from risk_scoring.config import NarrativeConfig

from .exceptions import GenerationError, MalformedResponseError


logger = logging.getLogger(__name__)


# ============================================================
# GENERATOR PROTOCOL
# ============================================================


class TextGenerator(Protocol):
    """Protocol for text generation providers."""

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the generated text for a prompt."""
        ...


# ============================================================
# DEEPSEEK GENERATOR
# ============================================================


class DeepSeekTextGenerator:
    """
    Text generator for DeepSeek's OpenAI-compatible API.

    Usage:
        generator = DeepSeekTextGenerator(api_key="...")
        text = await generator.generate(prompt, temperature=0.1, max_tokens=400)
        await generator.close()
    """

    PROVIDER = "deepseek"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepseek.com",
        model: str = "deepseek-chat",
        timeout_seconds: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config: NarrativeConfig) -> Optional["DeepSeekTextGenerator"]:
        """Build a generator, or None if no api key is configured."""
        if not config.enabled or not config.api_key:
            return None
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            model=config.model,
            timeout_seconds=config.timeout_seconds,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_seconds),
            )
        return self._session

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Send one chat completion request.

        Raises:
            GenerationError: On network failure or non-2xx status
            MalformedResponseError: On an unusable response body
        """
        session = await self._get_session()
        url = f"{self._base_url}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        body = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            async with session.post(url, headers=headers, json=body) as response:
                text = await response.text()
                if response.status < 200 or response.status >= 300:
                    raise GenerationError(
                        f"{self.PROVIDER} API error {response.status}",
                        provider=self.PROVIDER,
                        status_code=response.status,
                    )
        except aiohttp.ClientError as e:
            raise GenerationError(f"Network error: {e}", provider=self.PROVIDER) from e

        return self._extract_content(text)

    def _extract_content(self, text: str) -> str:
        try:
            data: Any = json.loads(text)
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                f"Unexpected {self.PROVIDER} response",
                provider=self.PROVIDER,
            ) from e

        if not isinstance(content, str):
            raise MalformedResponseError(
                f"{self.PROVIDER} content is not text",
                provider=self.PROVIDER,
            )
        return content

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
