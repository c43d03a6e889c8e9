"""Exception types and the user-facing error messages they map to.

Internal details (raw model output, HTTP codes from the provider) go to the
logs; clients only ever see one of ERROR_MESSAGES.
"""

ERROR_MESSAGES = {
    "OFF_TOPIC": "Please keep your request focused on comedy writing and joke development.",
    "INVALID_INPUT": "Invalid input. Please provide valid comedy content.",
    "API_ERROR": "Sorry, there was an error communicating with the AI. Please try again.",
    "RATE_LIMIT": "Too many requests. Please wait a moment and try again.",
}


class OffTopicError(ValueError):
    """Raised when the input guardrail rejects a free-text submission."""


class DecodeError(ValueError):
    """Raised when a model response cannot be turned into a usable result.

    Distinct from a legitimately empty result: it means the response itself
    was unusable.
    """


class RateLimitedError(RuntimeError):
    """Raised when a caller has exhausted its request window."""
