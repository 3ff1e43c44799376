from typing import List, Literal, Union

from pydantic import BaseModel, Field


class RecommendationsBody(BaseModel):
    """Documented request body; validation itself happens in the validator"""

    industry: str = Field(..., min_length=2, max_length=100,
                          description="Industry the project belongs to")
    region: str = Field(..., min_length=2, max_length=100,
                        description="Regulatory region")
    fileContent: str = Field(..., min_length=10, max_length=50000,
                             description="Text extracted from the uploaded document")


class RecommendationsResponse(BaseModel):
    recommendations: str


class ErrorResponse(BaseModel):
    error: str
    details: Union[List[str], str, None] = None


class HealthChecks(BaseModel):
    database: str
    azure_openai: Literal["configured", "missing key"]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    service: str
    checks: HealthChecks
