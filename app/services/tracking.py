import logging
import random
import time
from typing import Callable

from sqlmodel import Session

from app.core.errors import ConflictError
from app.repositories.order_repo import OrderRepository

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "TRK"

# Random part is 6 to 8 digits
MIN_RANDOM = 100_000
MAX_RANDOM = 99_999_999

# Random candidates tried before the timestamp fallback
DEFAULT_MAX_ATTEMPTS = 10


class TrackingNumberGenerator:
    """
    Allocates short human-readable order references ("TRK12345678").

    Best-effort uniqueness: each candidate is checked against the orders
    table on the caller's session. After `max_attempts` collisions a
    timestamp-derived candidate is tried once. The unique index on
    orders.tracking_number remains the final guard at commit.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.order_repo = order_repo
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()
        self.clock = clock

    def random_candidate(self) -> str:
        return f"{TRACKING_PREFIX}{self.rng.randint(MIN_RANDOM, MAX_RANDOM)}"

    def fallback_candidate(self) -> str:
        """TRK + last 8 digits of epoch milliseconds + 2-digit random suffix."""
        millis = str(int(self.clock() * 1000))
        suffix = self.rng.randint(0, 99)
        return f"{TRACKING_PREFIX}{millis[-8:]}{suffix:02d}"

    def generate(self, session: Session) -> str:
        """
        Return a tracking number not used by any order visible to `session`.

        Raises:
            ConflictError: random candidates and the fallback all collided.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.random_candidate()
            if not self.order_repo.tracking_number_exists(session, candidate):
                return candidate
            logger.warning(
                f"Tracking number collision on attempt {attempt}/{self.max_attempts}"
            )

        candidate = self.fallback_candidate()
        if self.order_repo.tracking_number_exists(session, candidate):
            logger.error("Tracking number fallback collided")
            raise ConflictError("Unable to allocate tracking number")
        return candidate
