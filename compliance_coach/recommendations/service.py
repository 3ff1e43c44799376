import logging

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from compliance_coach.core.errors import UpstreamError
from compliance_coach.recommendations.mapper import extract_recommendations
from compliance_coach.recommendations.prompt import build_chat_request
from compliance_coach.recommendations.validator import RecommendationRequest
from compliance_coach.upstream.client import AzureOpenAIClient

# Module-level logger for observability
logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, UpstreamError) and exc.is_transient


class RecommendationService:
    """Builds the prompt, calls Azure OpenAI and maps the completion to text.

    Steps run strictly in order: build, call, map. Retrying is opt-in via
    ``max_attempts``; with the default of 1 the upstream is called once.
    """

    def __init__(
        self,
        client: AzureOpenAIClient,
        max_attempts: int = 1,
        wait: wait_base = wait_exponential(multiplier=1, min=1, max=8),
    ):
        self.client = client
        self.max_attempts = max_attempts
        self.wait = wait

    async def _call(self, chat_request) -> dict:
        if self.max_attempts <= 1:
            return await self.client.create_chat_completion(chat_request)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying Azure OpenAI call (attempt %d/%d)",
                        attempt.retry_state.attempt_number,
                        self.max_attempts,
                    )
                return await self.client.create_chat_completion(chat_request)

    async def generate(self, request: RecommendationRequest) -> str:
        """Runs one recommendations request end to end.

        Raises:
            UpstreamError: On upstream failure, including malformed payloads
        """
        logger.info(
            "Processing recommendations request | industry=%s | region=%s | chars=%d",
            request.industry,
            request.region,
            len(request.document_text),
        )
        chat_request = build_chat_request(request)
        payload = await self._call(chat_request)
        recommendations = extract_recommendations(payload)
        logger.info("Successfully generated recommendations")
        return recommendations
