"""Request-scoped dependencies.

Everything long-lived (storage, limiter, assistant) sits on ``app.state``
and is resolved here, so route functions never touch module globals.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from tight_five.assistant import Assistant
from tight_five.errors import ERROR_MESSAGES, RateLimitedError
from tight_five.ratelimit import RateLimiter
from tight_five.storage import Storage, valid_owner


def _get_storage(request: Request) -> Storage:
    return request.app.state.storage


def _get_assistant(request: Request) -> Assistant:
    return request.app.state.assistant


def _get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


StorageDep = Annotated[Storage, Depends(_get_storage)]
AssistantDep = Annotated[Assistant, Depends(_get_assistant)]
RateLimiterDep = Annotated[RateLimiter, Depends(_get_rate_limiter)]


def _get_owner(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """The X-User-Id header names the owner; every data route is scoped to it."""
    if not x_user_id or not valid_owner(x_user_id):
        raise HTTPException(401, "Unauthorized")
    return x_user_id


OwnerDep = Annotated[str, Depends(_get_owner)]


def _rate_limited_owner(owner: OwnerDep, limiter: RateLimiterDep) -> str:
    if not limiter.check(owner):
        raise RateLimitedError(ERROR_MESSAGES["RATE_LIMIT"])
    return owner


LimitedOwnerDep = Annotated[str, Depends(_rate_limited_owner)]
