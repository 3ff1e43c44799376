import pytest

from compliance_coach.core.errors import MalformedResponseError, UpstreamError
from compliance_coach.recommendations.mapper import (
    client_error_details,
    extract_recommendations,
    upstream_error_body,
)


def test_extracts_first_choice(completion_payload):
    payload = completion_payload("first")
    payload["choices"].append({"message": {"content": "second"}})

    assert extract_recommendations(payload) == "first"


@pytest.mark.parametrize("payload", [
    {},
    {"choices": []},
    {"choices": [{}]},
    {"choices": [{"message": {}}]},
    {"choices": "nope"},
    {"choices": [{"message": {"content": None}}]},
    {"choices": [{"message": {"content": ["a", "b"]}}]},
])
def test_malformed_payloads(payload):
    with pytest.raises(MalformedResponseError):
        extract_recommendations(payload)


def test_malformed_response_is_an_upstream_error():
    assert issubclass(MalformedResponseError, UpstreamError)


def test_error_details_follow_mode():
    exc = UpstreamError("Request failed with status code 500", status_code=500)

    assert client_error_details(exc, production=False) == "Request failed with status code 500"
    assert client_error_details(exc, production=True) == "Failed to generate recommendations"


def test_error_body():
    body = upstream_error_body(UpstreamError("boom"), production=False)

    assert body.model_dump() == {"error": "Azure OpenAI error", "details": "boom"}
