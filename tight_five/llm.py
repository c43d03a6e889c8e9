"""LLM client: HTTP connection to a chat/completion backend.

The assistant injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, system: str, prompt: str) -> str: ...

`stage` is the task kind being served (e.g. "setup-generation"). The
implementation may use it for logging or routing; the simplest
implementation ignores it. `system` is the persona instruction and `prompt`
the user content built by the prompt pipeline.

Two implementations are provided:

    HttpLLM   real HTTP client, supports OpenAI-compatible chat and
                 KoboldCpp backends. Selected by provider_format.
    EchoLLM   returns the prompt back unchanged. Useful for smoke-testing
                 the wiring without a running model.

Production code constructs an HttpLLM from settings and hands it to the
Assistant. Tests use a stub callable instead.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

import httpx

from tight_five.decoder import extract_response_text

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol: every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, system: str, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# HttpLLM: connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["openai", "koboldcpp"]


class HttpLLM:
    """Async HTTP client for chat/completion backends.

    Supported formats:
      "openai"     POST /v1/chat/completions
                     {"model": ..., "messages": [system, user], ...}
                     Response: {"choices": [{"message": {"content": "..."}}]}
      "koboldcpp"  POST /api/v1/generate  {"prompt": system + user}
                     Response: {"results": [{"text": "..."}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "https://api.openai.com".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "openai".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 60.
        temperature:     Sampling temperature sent with every request.
        max_tokens:      Completion length cap sent with every request.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "openai",
        model: str = "",
        timeout: float = 60.0,
        temperature: float = 0.8,
        max_tokens: int = 1000,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout
        self._temperature = temperature
        self._max_tokens = max_tokens

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, system: str, prompt: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "openai":
            url = f"{self._base_url}/v1/chat/completions"
            body: dict = {
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                "temperature": self._temperature,
                "max_tokens": self._max_tokens,
            }
            if self._model:
                body["model"] = self._model
            return url, body

        # koboldcpp has no system role; prepend the persona to the prompt
        url = f"{self._base_url}/api/v1/generate"
        return url, {
            "prompt": f"{system}\n\n{prompt}",
            "max_length": self._max_tokens,
            "temperature": self._temperature,
        }

    async def __call__(self, stage: str, system: str, prompt: str) -> str:
        url, body = self._build_request(system, prompt)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {type(e).__name__}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise LLMError("Unexpected response format from LLM backend")

        text = extract_response_text(data)
        if not text:
            raise LLMError(f"Unexpected response format from {self._format} backend")
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM: returns the prompt unchanged; useful for smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the user prompt as-is. No network calls.

    Lets you verify the wiring (guardrail, prompt building, routes) end-to-end
    without a running model. Generation tasks decode the echoed prompt line by
    line; structured tasks fail to decode and surface as API errors.
    """

    async def __call__(self, stage: str, system: str, prompt: str) -> str:
        logger.debug("EchoLLM stage=%s prompt_len=%d", stage, len(prompt))
        return prompt


# ---------------------------------------------------------------------------
# LLMError: raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
