"""Three-state circuit breaker for AI calls."""

import time
from enum import Enum
from typing import Any, Callable, Dict

from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """Block calls after repeated failures and probe for recovery.

    CLOSED passes every call. ``failure_threshold`` consecutive failures
    move it to OPEN, which rejects calls until ``timeout_ms`` has passed
    since the last failure. The next check then moves it to HALF_OPEN;
    ``success_threshold`` successes close it again, any failure reopens it.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 3,
        timeout_ms: int = 60000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.timeout_ms = timeout_ms
        self._clock = clock

        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time = 0.0

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def can_execute(self) -> bool:
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if self._now_ms() - self.last_failure_time >= self.timeout_ms:
                LOGGER.info("Circuit breaker half-open, probing AI service")
                self.state = CircuitState.HALF_OPEN
                self.success_count = 0
                return True
            return False

        return True

    def record_success(self) -> None:
        self.failure_count = 0

        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.success_threshold:
                LOGGER.info("Circuit breaker closed")
                self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = self._now_ms()

        if self.state == CircuitState.HALF_OPEN:
            LOGGER.warning("Probe failed, circuit breaker reopened")
            self.state = CircuitState.OPEN
            self.success_count = 0
        elif self.failure_count >= self.failure_threshold:
            if self.state != CircuitState.OPEN:
                LOGGER.warning(f"Circuit breaker opened after {self.failure_count} failures")
            self.state = CircuitState.OPEN

    def get_state(self) -> CircuitState:
        return self.state

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "last_failure_time": self.last_failure_time,
        }
