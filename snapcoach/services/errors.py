"""
Error taxonomy for the meal pipeline.

- InputError: no (or unusable) image supplied
- ProviderError: vision provider/transport failure, message passed through
- MalformedResponse: provider text did not parse into the expected schema

All three are recoverable: the pipeline session catches them and routes the
user back to an actionable state.
"""


class InputError(ValueError):
    """No image supplied, or the image could not be read."""

    pass


class ProviderError(Exception):
    """The vision provider failed to produce a reply."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceUnavailableError(ProviderError):
    """AI service is temporarily unavailable (connection, timeout, 5xx, empty reply)."""

    pass


class RateLimitError(ProviderError):
    """Rate limit or quota exceeded."""

    pass


class MalformedResponse(Exception):
    """Provider reply could not be parsed into the expected schema."""

    def __init__(self, message: str, raw_text: str | None = None):
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text
