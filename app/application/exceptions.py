class ParseError(ValueError):
    """Raised when a timestamp or calendar instant cannot be parsed. Not retryable."""
    pass


class UpstreamUnavailable(RuntimeError):
    """Raised when the calendar, messaging or text-generation provider fails."""
    pass


class LLMUpstreamError(UpstreamUnavailable):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass


class AdmissionRejected(Exception):
    """Message was already handled or is too old to act on. No reply is sent."""

    def __init__(self, correspondent_id: str, reason: str) -> None:
        super().__init__(f"{reason}: {correspondent_id}")
        self.correspondent_id = correspondent_id
        self.reason = reason


class StaleMessage(AdmissionRejected):
    def __init__(self, correspondent_id: str, age_seconds: float) -> None:
        super().__init__(correspondent_id, "stale")
        self.age_seconds = age_seconds


class DuplicateMessage(AdmissionRejected):
    def __init__(self, correspondent_id: str) -> None:
        super().__init__(correspondent_id, "duplicate")


class UnknownSessionStep(ValueError):
    """Stored session step is not part of the script."""
    pass
