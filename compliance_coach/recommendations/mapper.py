from typing import Any

from compliance_coach.api.schemas import ErrorResponse
from compliance_coach.core.constants import Messages
from compliance_coach.core.errors import MalformedResponseError, UpstreamError


def extract_recommendations(payload: Any) -> str:
    """Return choices[0].message.content from a chat-completion payload."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(
            "Response has no choices[0].message.content") from e

    if not isinstance(content, str):
        raise MalformedResponseError(
            "choices[0].message.content is not a string")
    return content


def client_error_details(exc: UpstreamError, production: bool) -> str:
    if production:
        return Messages.GENERIC_UPSTREAM_DETAILS
    return exc.message


def upstream_error_body(exc: UpstreamError, production: bool) -> ErrorResponse:
    return ErrorResponse(
        error=Messages.UPSTREAM_ERROR,
        details=client_error_details(exc, production),
    )
