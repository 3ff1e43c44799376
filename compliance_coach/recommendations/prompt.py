from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel, ConfigDict, Field

from compliance_coach.core.constants import AppSettings
from compliance_coach.core.prompts import RECOMMENDATIONS_PROMPT, SYSTEM_PROMPT
from compliance_coach.recommendations.validator import RecommendationRequest

_TEMPLATE = PromptTemplate.from_template(RECOMMENDATIONS_PROMPT)


class ChatCompletionRequest(BaseModel):
    """One chat-completion call: fixed system message plus the rendered prompt"""

    model_config = ConfigDict(frozen=True)

    system_message: str = SYSTEM_PROMPT
    user_message: str
    max_tokens: int = Field(default=AppSettings.MAX_TOKENS, gt=0)

    def to_payload(self) -> dict:
        return {
            "messages": [
                {"role": "system", "content": self.system_message},
                {"role": "user", "content": self.user_message},
            ],
            "max_tokens": self.max_tokens,
        }


def build_prompt(request: RecommendationRequest) -> str:
    """Render the recommendations prompt. Values are inserted literally."""
    return _TEMPLATE.format(
        industry=request.industry,
        region=request.region,
        document_text=request.document_text,
    )


def build_chat_request(request: RecommendationRequest) -> ChatCompletionRequest:
    return ChatCompletionRequest(user_message=build_prompt(request))
