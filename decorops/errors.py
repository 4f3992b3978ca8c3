# decorops/errors.py
from __future__ import annotations
import functools
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import DataError, IntegrityError, OperationalError, DBAPIError

logger = logging.getLogger(__name__)

class DecorError(Exception):
    """Base for every error the decor engine reports to its callers."""
    status = 500
    kind = "error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message, "kind": self.kind}
        body.update(self.details)
        return body

class ValidationFailed(DecorError):
    status = 400
    kind = "validation"

class NotFound(DecorError):
    status = 404
    kind = "not_found"

class PreconditionFailed(DecorError):
    status = 409
    kind = "precondition_failed"

    def __init__(self, message: str, action: str, counter: str):
        super().__init__(message, action=action, counter=counter)
        self.action = action
        self.counter = counter

class Conflict(DecorError):
    status = 409
    kind = "conflict"

class Unavailable(DecorError):
    status = 503
    kind = "unavailable"

@contextmanager
def translate_db_errors(session, what: str):
    """Roll back and re-raise storage failures as DecorError kinds.

    Any other exception also rolls the session back before propagating, so
    the caller's session stays usable.
    """
    try:
        yield
    except DecorError:
        raise
    except IntegrityError as exc:
        session.rollback()
        logger.warning("%s: integrity violation: %s", what, exc.orig)
        raise Conflict(f"{what} conflicts with a concurrent change") from exc
    except DataError as exc:
        session.rollback()
        logger.warning("%s: value rejected by storage: %s", what, exc.orig)
        raise ValidationFailed("Value out of range for storage") from exc
    except OperationalError as exc:
        session.rollback()
        logger.error("%s: storage unavailable: %s", what, exc.orig)
        raise Unavailable("Storage is unavailable, try again later") from exc
    except DBAPIError as exc:
        session.rollback()
        if exc.connection_invalidated:
            logger.error("%s: connection lost: %s", what, exc.orig)
            raise Unavailable("Storage is unavailable, try again later") from exc
        raise
    except Exception:
        session.rollback()
        logger.exception("%s failed", what)
        raise

def retry_on_conflict(fn=None, *, attempts: int = 2):
    """Re-run the wrapped operation once more if it raised Conflict.

    The wrapped callable must take the session as its first argument; the
    session is rolled back before the retry so the second attempt re-reads
    current state.
    """
    def decorate(func):
        @functools.wraps(func)
        def wrapper(session, *args, **kwargs):
            last: Optional[Conflict] = None
            for attempt in range(attempts):
                try:
                    return func(session, *args, **kwargs)
                except Conflict as exc:
                    last = exc
                    session.rollback()
                    logger.info("%s hit a conflict (attempt %d/%d)", func.__name__, attempt + 1, attempts)
            raise last
        return wrapper
    if fn is not None:
        return decorate(fn)
    return decorate
