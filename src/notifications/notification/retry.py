"""Bounded retry with exponential backoff for delivery attempts.

A delivery that still fails after the last attempt is dropped and logged;
the caller is never interrupted. Only ``DeliveryError`` is retried.
"""

import os
import time

import structlog
from shared.exceptions import DeliveryError

logger = structlog.get_logger(__name__)

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF = 0.1  # seconds, doubled after each failure
MAX_BACKOFF = 2.0


def delivery_attempts() -> int:
    return max(1, int(os.getenv("NOTIFICATIONS_DELIVERY_ATTEMPTS", DEFAULT_ATTEMPTS)))


def delivery_backoff() -> float:
    return max(0.0, float(os.getenv("NOTIFICATIONS_RETRY_BACKOFF", DEFAULT_BACKOFF)))


def deliver_with_retry(send, attempts=None, backoff=None, sleep=time.sleep, **context) -> bool:
    """Call ``send()`` until it succeeds or the attempts run out.

    Returns:
        True when a call succeeded, False when the delivery was dropped.
    """
    attempts = attempts or delivery_attempts()
    delay = delivery_backoff() if backoff is None else backoff

    for attempt in range(1, attempts + 1):
        try:
            send()
            return True
        except DeliveryError as exc:
            if attempt == attempts:
                logger.error(
                    "delivery_dropped",
                    attempts=attempts,
                    error=str(exc.messages),
                    **context,
                )
                return False

            logger.warning(
                "delivery_retry",
                attempt=attempt,
                attempts=attempts,
                error=str(exc.messages),
                **context,
            )
            if delay:
                sleep(min(delay * 2 ** (attempt - 1), MAX_BACKOFF))

    return False
