from dataclasses import dataclass
from typing import Dict

from fastapi import Depends, Request

from compliance_coach.api.rate_limit import RateLimitStatus, SlidingWindowRateLimiter
from compliance_coach.core.config import Settings
from compliance_coach.core.errors import RateLimitExceeded
from compliance_coach.recommendations.service import RecommendationService
from compliance_coach.upstream.client import AzureOpenAIClient


@dataclass
class AppContext:
    """Process-wide collaborators, built once at startup and injected"""

    settings: Settings
    client: AzureOpenAIClient
    service: RecommendationService
    rate_limiter: SlidingWindowRateLimiter

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> "AppContext":
        client = AzureOpenAIClient(
            endpoint=settings.AZURE_OPENAI_ENDPOINT,
            api_key=settings.AZURE_OPENAI_KEY,
            timeout=settings.UPSTREAM_TIMEOUT,
            transport=transport,
        )
        return cls(
            settings=settings,
            client=client,
            service=RecommendationService(
                client, max_attempts=settings.UPSTREAM_MAX_ATTEMPTS),
            rate_limiter=SlidingWindowRateLimiter(
                limit=settings.RATE_LIMIT,
                window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            ),
        )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_settings_dependency(context: AppContext = Depends(get_context)) -> Settings:
    return context.settings


def get_recommendation_service(
    context: AppContext = Depends(get_context),
) -> RecommendationService:
    return context.service


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


API_PREFIX = "/api"


def is_rate_limited_path(path: str) -> bool:
    return path == API_PREFIX or path.startswith(API_PREFIX + "/")


def rate_limit_headers(status: RateLimitStatus) -> Dict[str, str]:
    return {
        "RateLimit-Limit": str(status.limit),
        "RateLimit-Remaining": str(status.remaining),
        "RateLimit-Reset": str(status.reset_after),
    }


async def check_rate_limit(context: AppContext, request: Request) -> RateLimitStatus:
    """
    Count one request against the client's window.

    Raises:
        RateLimitExceeded: When the client has used up its window
    """
    status = await context.rate_limiter.hit(client_ip(request))
    if not status.allowed:
        raise RateLimitExceeded(
            retry_after=status.reset_after, headers=rate_limit_headers(status))
    return status
