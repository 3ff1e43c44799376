from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from compliance_coach.core.constants import FieldLimits
from compliance_coach.core.errors import ValidationError


class RecommendationRequest(BaseModel):
    """Normalized, bounds-checked input for one recommendations run"""

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    industry: str = Field(
        ..., min_length=FieldLimits.LABEL_MIN, max_length=FieldLimits.LABEL_MAX)
    region: str = Field(
        ..., min_length=FieldLimits.LABEL_MIN, max_length=FieldLimits.LABEL_MAX)
    document_text: str = Field(
        ...,
        alias="fileContent",
        min_length=FieldLimits.DOCUMENT_MIN,
        max_length=FieldLimits.DOCUMENT_MAX,
    )


def _describe(error: Dict[str, Any]) -> str:
    loc = error.get("loc") or ()
    field = '"%s"' % loc[0] if loc else '"value"'
    ctx = error.get("ctx") or {}
    kind = error["type"]

    if kind == "missing":
        return f"{field} is required"
    if kind == "string_type":
        return f"{field} must be a string"
    if kind == "string_too_short":
        return f"{field} length must be at least {ctx['min_length']} characters long"
    if kind == "string_too_long":
        return (f"{field} length must be less than or equal to "
                f"{ctx['max_length']} characters long")
    if kind == "extra_forbidden":
        return f"{field} is not allowed"
    return f"{field} {error['msg']}"


def validate_recommendation_request(payload: Any) -> RecommendationRequest:
    """
    Validate a decoded request body.

    Every violated field contributes one message; all of them are
    reported together.

    Raises:
        ValidationError: When any field is missing, mistyped or out of bounds
    """
    if not isinstance(payload, dict):
        raise ValidationError(['"value" must be of type object'])

    try:
        return RecommendationRequest.model_validate(payload)
    except PydanticValidationError as e:
        messages: List[str] = []
        seen = set()
        for error in e.errors():
            loc = error.get("loc") or ()
            key = loc[0] if loc else None
            if key in seen:
                continue
            seen.add(key)
            messages.append(_describe(error))
        raise ValidationError(messages) from e
