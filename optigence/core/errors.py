"""
Error taxonomy for the routing pipeline.

Component-local failures (one provider, one extractor, one suggestion
source) are caught close to where they happen and converted into degraded
results. Only the errors below with an HTTP-facing status ever reach a
router, which maps them with to_http_exception().

    ProviderUnavailableError   one LLM failed          -> next provider
    ParseError                 bad JSON from an LLM    -> keyword fallback
    ValidationError            bad request             -> 400
    TierRestrictedError        action not in the tier  -> 403
    UnknownActionError         bad cross-module action -> failed result
    AllSystemsFailedError      every fallback failed   -> 500
    RateLimitExceededError     too many requests       -> 429
"""

from typing import Optional

from fastapi import HTTPException, status


class OptigenceError(Exception):
    """Base class for application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: Optional[str] = None

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def detail(self) -> str:
        return self.public_message or self.message


class ProviderUnavailableError(OptigenceError):
    """A single LLM provider could not be reached or is not configured."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, provider: str, message: str = ""):
        super().__init__(f"{provider}: {message}" if message else provider)
        self.provider = provider


class ParseError(OptigenceError):
    """A provider returned output that does not match the expected schema."""

    def __init__(self, message: str = "", raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class ValidationError(OptigenceError):
    """Missing or invalid request fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class TierRestrictedError(OptigenceError):
    """The requested action is not available in the user's subscription tier."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, action: str, tier: str):
        super().__init__(f"Action '{action}' is not available on the {tier} tier")
        self.action = action
        self.tier = tier


class UnknownActionError(OptigenceError):
    """No handler for a (target module, action type) pair."""

    status_code = status.HTTP_400_BAD_REQUEST


class AllSystemsFailedError(OptigenceError):
    """Every provider in the fallback chain failed."""

    public_message = "All LLM systems failed"


class RateLimitExceededError(OptigenceError):
    """Policy rejection from the rate limiter."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, limit: int, reset_at: float):
        super().__init__(f"Rate limit exceeded, retry after {retry_after}s")
        self.retry_after = retry_after
        self.limit = limit
        self.reset_at = reset_at


def to_http_exception(error: OptigenceError) -> HTTPException:
    """Convert an application error into the matching HTTPException."""
    return HTTPException(status_code=error.status_code, detail=error.detail())
