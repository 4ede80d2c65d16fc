"""
Error kinds for talking to the text-generation server.

Only MalformedDelta is recovered locally (inside the stream consumer);
every other error aborts the current interaction.
"""

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again later."


class AssistantError(Exception):
    """Base class for every failure of one LLM interaction."""


class StreamUnavailable(AssistantError):
    """Response is not 2xx or has no readable body. Raised before parsing."""


class StreamFailure(AssistantError):
    """The stream broke while being read (network drop, decode error, cancel)."""


class MalformedDelta(AssistantError):
    """One `data:` payload could not be parsed into a text delta."""


class StructuredResponseInvalid(AssistantError):
    """Structured (JSON schema) response is absent, not JSON, or misses a field."""


class RequestFailed(AssistantError):
    """Transport error or non-2xx status on a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
