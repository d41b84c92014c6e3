import logging
import time
from enum import Enum

from photoslurp.config import MAX_AUTH_REFRESHES, MAX_BACKOFF_ATTEMPTS
from photoslurp.errors import AuthFailure, NetworkError, RateLimited

logger = logging.getLogger(__name__)


class Outcome(Enum):
    SUCCESS = "success"
    RETRY_AUTH = "retry-auth"
    RETRY_BACKOFF = "retry-backoff"
    FATAL = "fatal"


def classify(exc: Exception) -> Outcome:
    if isinstance(exc, AuthFailure):
        return Outcome.RETRY_AUTH
    if isinstance(exc, (RateLimited, NetworkError)):
        return Outcome.RETRY_BACKOFF
    return Outcome.FATAL


def attempt(operation):
    """Run operation once; return (Outcome, result or exception)."""
    try:
        return Outcome.SUCCESS, operation()
    except Exception as e:
        return classify(e), e


def call_with_retry(
    operation,
    token_supplier=None,
    max_refreshes: int = MAX_AUTH_REFRESHES,
    max_attempts: int = MAX_BACKOFF_ATTEMPTS,
    idempotent: bool = True,
    sleep=time.sleep,
    description: str = "request",
):
    """
    Run operation() until it succeeds or retries run out.

    AuthFailure -> refresh the token and repeat the identical call, at most
    max_refreshes times. Without a token_supplier it is fatal.
    RateLimited / NetworkError -> sleep n**2 seconds, at most max_attempts
    such failures, counted apart from the refreshes. A refresh that fails
    with a NetworkError backs off the same way and is tried again.
    idempotent=False: a NetworkError from operation() propagates at once,
    since the request may have been applied.
    Anything else propagates untouched.
    """
    refreshes = 0
    backoffs = 0
    needs_refresh = False
    while True:
        if needs_refresh:
            outcome, result = attempt(token_supplier.refresh)
            if outcome is Outcome.SUCCESS:
                needs_refresh = False
                continue
        else:
            outcome, result = attempt(operation)
            if outcome is Outcome.SUCCESS:
                return result

        if outcome is Outcome.FATAL:
            raise result

        if outcome is Outcome.RETRY_AUTH:
            if token_supplier is None or needs_refresh:
                raise result
            if refreshes >= max_refreshes:
                raise AuthFailure(
                    f"{description} still unauthorized after {refreshes} token refreshes"
                ) from result
            refreshes += 1
            delay = refreshes ** 2
            logger.warning("%s unauthorized, refreshing token (%d/%d) in %ds",
                           description, refreshes, max_refreshes, delay)
            sleep(delay)
            needs_refresh = True
            continue

        if not idempotent and not needs_refresh and isinstance(result, NetworkError):
            raise result
        backoffs += 1
        if backoffs >= max_attempts:
            logger.error("%s failed after %d attempts: %s", description, backoffs, result)
            raise result
        delay = backoffs ** 2
        logger.warning("%s failed (%s), retrying in %ds", description, result, delay)
        sleep(delay)
