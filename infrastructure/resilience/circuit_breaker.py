"""
Circuit breaker for calls to external integrations (ad-account providers).
"""

import asyncio
import threading
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from utils.logging_config import get_logger

logger = get_logger(__name__)


class CircuitBreakerState(Enum):
    """Circuit breaker states"""
    CLOSED = "closed"      # Normal operation, requests pass through
    OPEN = "open"          # Circuit is open, requests are blocked
    HALF_OPEN = "half_open"  # Testing if service has recovered


class CircuitBreakerError(Exception):
    """Raised when a call is refused because the circuit is open"""

    def __init__(self, name: str, remaining_seconds: float):
        self.name = name
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"Circuit breaker '{name}' is OPEN. "
            f"Service appears to be down. Retry in {remaining_seconds:.0f}s."
        )


class CircuitBreaker:
    """
    Circuit breaker implementation for external calls

    States:
    - CLOSED: Normal operation, all requests pass through
    - OPEN: Circuit is open, requests fail fast without calling out
    - HALF_OPEN: Testing recovery, one request allowed through

    A call counts as a failure when it raises or returns a falsy outcome.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        name: str = "CircuitBreaker",
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize circuit breaker

        Args:
            failure_threshold: Number of consecutive failures before opening circuit
            recovery_timeout: Seconds to wait before attempting recovery
            name: Name for logging and identification
            clock: Time source (tests substitute a fake)
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.name = name
        self._clock = clock

        # State tracking
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = CircuitBreakerState.CLOSED

        # Thread safety
        self._lock = threading.Lock()

        logger.info(f"CircuitBreaker '{name}' initialized with threshold={failure_threshold}, timeout={recovery_timeout}s")

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to attempt recovery"""
        if self.last_failure_time is None:
            return False

        time_since_failure = self._clock() - self.last_failure_time
        return time_since_failure.total_seconds() >= self.recovery_timeout

    def _remaining_timeout(self) -> float:
        if self.last_failure_time is None:
            return float(self.recovery_timeout)
        elapsed = (self._clock() - self.last_failure_time).total_seconds()
        return max(0.0, self.recovery_timeout - elapsed)

    def record_success(self):
        """Record a successful operation"""
        with self._lock:
            self.failure_count = 0
            self.success_count += 1

            if self.state == CircuitBreakerState.HALF_OPEN:
                # Recovery successful, close the circuit
                self.state = CircuitBreakerState.CLOSED
                logger.info(f"CircuitBreaker '{self.name}' recovered - state: CLOSED")

    def record_failure(self):
        """Record a failed operation"""
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = self._clock()

            if self.state == CircuitBreakerState.HALF_OPEN:
                # Recovery attempt failed, open circuit again
                self.state = CircuitBreakerState.OPEN
                logger.warning(f"CircuitBreaker '{self.name}' recovery failed - state: OPEN")

            elif self.state == CircuitBreakerState.CLOSED and self.failure_count >= self.failure_threshold:
                # Threshold reached, open the circuit
                self.state = CircuitBreakerState.OPEN
                logger.warning(f"CircuitBreaker '{self.name}' opened - failures: {self.failure_count}")

    def can_execute(self) -> bool:
        """Check if a request can be executed"""
        with self._lock:
            if self.state == CircuitBreakerState.CLOSED:
                return True

            elif self.state == CircuitBreakerState.OPEN:
                if self._should_attempt_reset():
                    # Time to test recovery
                    self.state = CircuitBreakerState.HALF_OPEN
                    logger.info(f"CircuitBreaker '{self.name}' attempting recovery - state: HALF_OPEN")
                    return True
                return False

            # HALF_OPEN: the single trial call is already in flight
            return False

    async def call(self, func: Callable[[], Awaitable[Any]]) -> Any:
        """
        Await a coroutine function with circuit breaker protection

        Args:
            func: Zero-argument coroutine function

        Returns:
            The coroutine's result

        Raises:
            CircuitBreakerError: If circuit is open
            Original exception: If the call raises
        """
        if not self.can_execute():
            raise CircuitBreakerError(self.name, self._remaining_timeout())

        try:
            result = await func()
        except (Exception, asyncio.CancelledError):
            # A cancelled trial call must not leave the circuit HALF_OPEN
            self.record_failure()
            raise

        if result:
            self.record_success()
        else:
            self.record_failure()
        return result

    def get_state(self) -> dict:
        """Get current circuit breaker state for monitoring"""
        with self._lock:
            remaining_timeout = 0.0
            if self.state == CircuitBreakerState.OPEN:
                remaining_timeout = self._remaining_timeout()

            return {
                "name": self.name,
                "state": self.state.value,
                "failure_count": self.failure_count,
                "success_count": self.success_count,
                "failure_threshold": self.failure_threshold,
                "remaining_timeout": remaining_timeout,
                "last_failure_time": self.last_failure_time.isoformat() if self.last_failure_time else None
            }

    def reset(self):
        """Manually reset the circuit breaker to CLOSED state"""
        with self._lock:
            self.state = CircuitBreakerState.CLOSED
            self.failure_count = 0
            self.last_failure_time = None
            logger.info(f"CircuitBreaker '{self.name}' manually reset - state: CLOSED")
