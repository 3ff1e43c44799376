from compliance_coach.core.prompts import SYSTEM_PROMPT
from compliance_coach.recommendations.prompt import (
    ChatCompletionRequest,
    build_chat_request,
    build_prompt,
)
from compliance_coach.recommendations.validator import RecommendationRequest


def make_request(**overrides):
    values = {
        "industry": "Financial Services",
        "region": "Singapore",
        "fileContent": "Line one of the plan.\nLine two mentions {braces} and %s.",
    }
    values.update(overrides)
    return RecommendationRequest.model_validate(values)


def test_prompt_contains_inputs_verbatim():
    request = make_request()

    prompt = build_prompt(request)

    assert "from Financial Services industry in Singapore" in prompt
    assert "Based on Financial Services industry standards and Singapore regulatory requirements." in prompt
    assert "Document Content:\n" + request.document_text + "\n" in prompt


def test_prompt_is_deterministic():
    assert build_prompt(make_request()) == build_prompt(make_request())


def test_template_sequences_in_input_are_not_interpreted():
    request = make_request(industry="{region}", fileContent="{document_text} {industry} }{")

    prompt = build_prompt(request)

    assert "from {region} industry in Singapore" in prompt
    assert "{document_text} {industry} }{" in prompt


def test_prompt_structure():
    prompt = build_prompt(make_request())

    for field in ("**GAP:**", "**DESCRIPTION:**", "**RECOMMENDATION:**",
                  "**ACTION:**", "**CONFIGURATION:**"):
        assert field in prompt
    assert "Microsoft 365 tenant" in prompt
    assert "IGNORE: Infrastructure, on-premises systems, third-party tools, hardware" in prompt
    assert prompt.endswith(
        "Provide 2-4 structured recommendations that can be implemented "
        "immediately through M365 admin portals.")


def test_document_is_not_truncated():
    document = "word " * 9_999
    request = make_request(fileContent=document)

    assert document.strip() in build_prompt(request)


def test_chat_request_payload():
    request = make_request()

    chat_request = build_chat_request(request)

    assert isinstance(chat_request, ChatCompletionRequest)
    assert chat_request.to_payload() == {
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(request)},
        ],
        "max_tokens": 800,
    }
