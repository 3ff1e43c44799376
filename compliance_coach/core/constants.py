from enum import Enum


class Environment(str, Enum):
    """Deployment modes understood by the service"""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


class AppSettings:
    """Central place for all application-level configuration"""

    SERVICE_NAME: str = "AI Delivery Compliance Coach"
    VERSION: str = "1.0.0"
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    AZURE_OPENAI_ENDPOINT: str = (
        "https://ameya-3557-resource.cognitiveservices.azure.com/openai/deployments/"
        "gpt-4o-mini/chat/completions?api-version=2023-03-15-preview"
    )
    UPSTREAM_TIMEOUT: float = 30.0
    UPSTREAM_MAX_ATTEMPTS: int = 1
    MAX_TOKENS: int = 800

    HOST: str = "0.0.0.0"
    PORT: int = 5000
    ALLOWED_ORIGINS: str = "*"
    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    LOG_LEVEL: str = "INFO"


class FieldLimits:
    """Inclusive length bounds for recommendation inputs"""

    LABEL_MIN = 2
    LABEL_MAX = 100
    DOCUMENT_MIN = 10
    DOCUMENT_MAX = 50_000


class Messages:
    INVALID_INPUT = "Invalid input"
    UPSTREAM_ERROR = "Azure OpenAI error"
    GENERIC_UPSTREAM_DETAILS = "Failed to generate recommendations"
    INTERNAL_ERROR = "Internal server error"
    RATE_LIMITED = "Too many requests from this IP, please try again later."
    KEY_CONFIGURED = "configured"
    KEY_MISSING = "missing key"
    NOT_APPLICABLE = "not applicable"
