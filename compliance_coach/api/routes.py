import logging
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from .dependencies import (
    API_PREFIX,
    get_recommendation_service,
    get_settings_dependency,
)
from .schemas import (
    ErrorResponse,
    HealthChecks,
    HealthResponse,
    RecommendationsBody,
    RecommendationsResponse,
)
from compliance_coach.core.config import Settings
from compliance_coach.core.constants import AppSettings, Messages
from compliance_coach.core.errors import UpstreamError
from compliance_coach.recommendations.mapper import upstream_error_body
from compliance_coach.recommendations.service import RecommendationService
from compliance_coach.recommendations.validator import validate_recommendation_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_PREFIX, tags=["Compliance Coach"])


@router.get("/health", response_model=HealthResponse)
async def health(
    settings: Annotated[Settings, Depends(get_settings_dependency)],
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        version=AppSettings.VERSION,
        service=AppSettings.SERVICE_NAME,
        checks=HealthChecks(
            database=Messages.NOT_APPLICABLE,
            azure_openai=(Messages.KEY_CONFIGURED if settings.api_key_configured
                          else Messages.KEY_MISSING),
        ),
    )


@router.post(
    "/recommendations",
    response_model=RecommendationsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        429: {"description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Azure OpenAI error"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": RecommendationsBody.model_json_schema()}
            },
        }
    },
)
async def recommendations(
    payload: Annotated[Any, Body(...)],
    service: Annotated[RecommendationService, Depends(get_recommendation_service)],
    settings: Annotated[Settings, Depends(get_settings_dependency)],
):
    """
    Turn an extracted project document into Microsoft 365 compliance
    recommendations for the given industry and region.
    """
    # ValidationError is rendered as 400 by the application handler
    request = validate_recommendation_request(payload)

    try:
        text = await service.generate(request)
    except UpstreamError as exc:
        logger.error(
            "Azure OpenAI error | status=%s | %s", exc.status_code, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=upstream_error_body(exc, settings.is_production).model_dump(),
        )

    return RecommendationsResponse(recommendations=text)
