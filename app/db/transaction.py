import asyncio
from typing import Awaitable, Callable, TypeVar

from loguru import logger
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceUnavailableError
from app.core.settings import settings

T = TypeVar("T")

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}


def is_transient_error(exc: BaseException) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code in RETRYABLE_SQLSTATES


async def run_atomic(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    attempts: int | None = None,
    delay: float | None = None,
) -> T:
    """
    Run `work` and commit it as one transaction.

    - any error rolls the whole unit back
    - transient storage errors re-run the unit from scratch with linear back-off
    - when the attempts run out the caller gets a 503
    `work` must not commit on its own and must re-read everything it decides on.
    """
    attempts = attempts or settings.DB_RETRY_ATTEMPTS
    delay = settings.DB_RETRY_DELAY_SECONDS if delay is None else delay

    for attempt in range(1, attempts + 1):
        try:
            result = await work()
            await db.commit()
            return result
        except Exception as e:
            await db.rollback()
            if not is_transient_error(e):
                raise
            if attempt >= attempts:
                logger.error(f"Transaction failed after {attempts} attempts: {e}")
                raise ServiceUnavailableError() from e
            logger.warning(f"Transient storage error (attempt {attempt}/{attempts}): {e}")
            await asyncio.sleep(delay * attempt)

    raise ServiceUnavailableError()
