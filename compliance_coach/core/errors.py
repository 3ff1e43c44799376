from typing import Dict, List, Optional


class ComplianceCoachError(Exception):
    """Base exception for the service"""
    pass


class ValidationError(ComplianceCoachError):
    """Client input failed validation; carries one message per violated field"""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class UpstreamError(ComplianceCoachError):
    """Network failure, timeout or non-2xx status from the model provider"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_transient(self) -> bool:
        # No status means the request never got an answer (network, timeout)
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class MalformedResponseError(UpstreamError):
    """Upstream answered 2xx but the body does not have the expected shape"""

    @property
    def is_transient(self) -> bool:
        return False


class RateLimitExceeded(ComplianceCoachError):
    """Client exceeded its request budget for the current window"""

    def __init__(self, retry_after: int, headers: Optional[Dict[str, str]] = None):
        self.retry_after = retry_after
        self.headers = dict(headers or {})
        super().__init__(f"Rate limit exceeded, retry after {retry_after}s")


class ConfigurationError(ComplianceCoachError):
    """Fatal misconfiguration detected at startup"""
    pass
