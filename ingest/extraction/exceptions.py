class ExtractionError(Exception):
    """Raised when an LLM extraction call fails."""


class ExtractionResponseError(ExtractionError):
    """Raised when the provider response cannot be turned into a JSON object."""


class ExtractionNetworkError(ExtractionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
