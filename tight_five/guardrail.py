"""Keyword guardrail for free-text input.

Runs before any model call so obviously off-topic requests never leave the
server. It is a heuristic, not a classifier; the only promise is that the
same text always gets the same verdict.

  1. Any deny-list keyword -> reject.
  2. Shorter than SHORT_INPUT_CHARS -> accept (too short to judge).
  3. Longer than LONG_INPUT_CHARS with no allow-list keyword -> reject.
  4. Otherwise accept.

Keyword lists and thresholds are frozen product constants.
"""

import logging

from tight_five.errors import ERROR_MESSAGES, OffTopicError

logger = logging.getLogger(__name__)

OFF_TOPIC_KEYWORDS: tuple[str, ...] = (
    "weather",
    "recipe",
    "medical",
    "legal",
    "financial advice",
    "how to cook",
    "stock market",
    "health diagnosis",
)

COMEDY_KEYWORDS: tuple[str, ...] = (
    "joke",
    "premise",
    "punchline",
    "setup",
    "funny",
    "laugh",
    "comedy",
    "standup",
    "routine",
    "tag",
    "callback",
    "crowd work",
    "act out",
    "topper",
)

SHORT_INPUT_CHARS = 20
LONG_INPUT_CHARS = 100


def is_on_topic(text: str) -> bool:
    lowered = text.lower()
    if any(keyword in lowered for keyword in OFF_TOPIC_KEYWORDS):
        return False
    if len(text) < SHORT_INPUT_CHARS:
        return True
    has_comedy_keyword = any(keyword in lowered for keyword in COMEDY_KEYWORDS)
    if len(text) > LONG_INPUT_CHARS and not has_comedy_keyword:
        return False
    return True


def require_on_topic(*texts: str) -> None:
    """Raise OffTopicError if any of the given texts fails the guardrail."""
    for text in texts:
        if not is_on_topic(text):
            logger.info("Guardrail rejected input (len=%d)", len(text))
            raise OffTopicError(ERROR_MESSAGES["OFF_TOPIC"])
