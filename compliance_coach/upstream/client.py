from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

import httpx
from pydantic import SecretStr

from compliance_coach.core.constants import AppSettings
from compliance_coach.core.errors import MalformedResponseError, UpstreamError
from compliance_coach.recommendations.prompt import ChatCompletionRequest

logger = logging.getLogger(__name__)


class AzureOpenAIClient:
    """
    Client for an Azure OpenAI chat-completions deployment.

    Features:
    - One pooled httpx.AsyncClient per process
    - Hard deadline on every call, converted to UpstreamError
    - No retries (the caller owns retry policy)
    - Credential kept out of error messages and logs
    - Async context manager support
    """

    def __init__(
        self,
        endpoint: str = AppSettings.AZURE_OPENAI_ENDPOINT,
        api_key: SecretStr | None = None,
        timeout: float = AppSettings.UPSTREAM_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._api_key = api_key

        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return self._api_key is not None

    def _headers(self) -> Dict[str, str]:
        return {
            "api-key": self._api_key.get_secret_value(),
            "Content-Type": "application/json",
        }

    async def create_chat_completion(self, chat_request: ChatCompletionRequest) -> Dict[str, Any]:
        """
        POST one chat-completion request and return the decoded JSON body.

        Raises:
            UpstreamError: On network failure, timeout or non-2xx status
            MalformedResponseError: When a 2xx body is not a JSON object
        """
        if not self.configured:
            raise UpstreamError("Azure OpenAI API key is not configured")

        try:
            response = await asyncio.wait_for(
                self._http_client.post(
                    self.endpoint,
                    json=chat_request.to_payload(),
                    headers=self._headers(),
                ),
                timeout=self.timeout,
            )
            response.raise_for_status()

        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamError(
                f"Request timed out after {self.timeout:g}s") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "Azure OpenAI returned %d: %s", status_code, e.response.text[:500])
            raise UpstreamError(
                f"Request failed with status code {status_code}",
                status_code=status_code,
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(
                f"Request failed: {type(e).__name__}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Response body is not valid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise MalformedResponseError(
                "Expected a JSON object from Azure OpenAI",
                status_code=response.status_code,
            )
        return body

    async def aclose(self) -> None:
        """Close underlying HTTP client"""
        await self._http_client.aclose()

    async def __aenter__(self) -> 'AzureOpenAIClient':
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
