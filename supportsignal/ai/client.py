"""Single-provider OpenRouter client with retry, plus in-process guards.

``OpenRouterClient`` retries a failed call with exponential backoff and
gives up immediately on authentication failures. ``RateLimiter`` and
``CostTracker`` are per-process counters with no cross-instance
coordination.
"""

import asyncio
import random
import string
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import httpx
from httpx import TimeoutException

from supportsignal.ai.base import AIRequest, AIResponse
from supportsignal.ai.providers import (
    OpenRouterProvider,
    build_chat_payload,
    openrouter_cost,
)
from supportsignal.core.exceptions import APIClientError, APITimeoutError, AuthenticationError
from supportsignal.utils.logging import get_logger

LOGGER = get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def generate_correlation_id() -> str:
    """Return an opaque id of the form ``ai-{epoch_ms}-{9 base36 chars}``."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"ai-{int(time.time() * 1000)}-{suffix}"


class OpenRouterClient:
    """OpenRouter chat completions client with bounded retry.

    Each failed attempt is retried up to ``max_retries`` attempts in total,
    waiting ``2 ** attempt`` seconds between attempts. HTTP 401 responses are
    never retried.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        default_model: str = "openai/gpt-5-nano",
        max_retries: int = 3,
        timeout_ms: int = 30000,
    ):
        """Initialize the client.

        Args:
            api_key: OpenRouter API key
            base_url: API base URL without the endpoint path
            default_model: Model used when a request does not name one
            max_retries: Maximum number of attempts per request
            timeout_ms: Per-attempt HTTP timeout in milliseconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.max_retries = max_retries
        self.timeout_ms = timeout_ms
        self.logger = LOGGER

        LOGGER.info(f"Initialized OpenRouter client with model {self.default_model}")

    async def send_request(self, request: AIRequest) -> AIResponse:
        """Send a request, retrying transient failures.

        Args:
            request: The AI request; ``model`` defaults to the client's model

        Returns:
            AIResponse describing success or the last failure
        """
        start = time.monotonic()
        model = request.model or self.default_model
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                data = await self._make_api_call(request, model)
                tokens = data["usage"].get("total_tokens") if data.get("usage") else None

                if data.get("finish_reason"):
                    self.logger.debug(
                        f"OpenRouter finish_reason: {data['finish_reason']}",
                        extra={"correlation_id": request.correlation_id},
                    )

                return AIResponse(
                    success=True,
                    content=data["content"] or "",
                    model=model,
                    correlation_id=request.correlation_id,
                    tokens_used=tokens,
                    cost=openrouter_cost(tokens, model),
                    processing_time_ms=int((time.monotonic() - start) * 1000),
                    provider="openrouter",
                    finish_reason=data.get("finish_reason"),
                )

            except AuthenticationError as e:
                last_error = e
                self.logger.error(
                    "OpenRouter rejected credentials; not retrying",
                    extra={"correlation_id": request.correlation_id},
                )
                break

            except Exception as e:
                last_error = e
                self.logger.warning(
                    f"OpenRouter call failed (Attempt {attempt}/{self.max_retries}): {e}",
                    extra={"correlation_id": request.correlation_id, "attempt": attempt},
                )
                if attempt < self.max_retries:
                    await self._wait_before_retry(attempt)

        return AIResponse(
            success=False,
            model=model,
            correlation_id=request.correlation_id,
            processing_time_ms=int((time.monotonic() - start) * 1000),
            error=str(last_error) if last_error else "Unknown error",
            provider="openrouter",
        )

    async def _make_api_call(self, request: AIRequest, model: str) -> Dict[str, Any]:
        """Perform one HTTP call.

        Raises:
            AuthenticationError: On HTTP 401
            APITimeoutError: When the call times out
            APIClientError: On any other non-2xx status or malformed body
        """
        payload = build_chat_payload(request, model)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": OpenRouterProvider.REFERER,
            "X-Title": OpenRouterProvider.TITLE,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_ms / 1000) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions", headers=headers, json=payload
                )
        except TimeoutException as e:
            raise APITimeoutError(f"OpenRouter API timeout after {self.timeout_ms}ms", original_error=e)

        if response.status_code == 401:
            raise AuthenticationError(f"OpenRouter API error: 401 - {response.text}")
        if response.status_code >= 400:
            raise APIClientError(f"OpenRouter API error: {response.status_code} - {response.text}")

        data = response.json()
        choices = data.get("choices") or []
        if not choices or not choices[0].get("message"):
            raise APIClientError("Invalid response format from OpenRouter API")

        return {
            "content": choices[0]["message"].get("content"),
            "usage": data.get("usage"),
            "finish_reason": choices[0].get("finish_reason"),
        }

    async def _wait_before_retry(self, attempt: int) -> None:
        """Exponential backoff wait."""
        await asyncio.sleep(2 ** attempt)


class RateLimiter:
    """Sliding-window request limiter keyed by caller."""

    def __init__(
        self,
        window_ms: int = 60000,
        max_requests: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _valid_requests(self, key: str, now: float) -> List[float]:
        window_start = now - self.window_ms
        return [t for t in self._requests.get(key, []) if t > window_start]

    def _prune(self, now: float) -> None:
        """Drop keys whose requests have all left the window."""
        for key in list(self._requests):
            if not self._valid_requests(key, now):
                del self._requests[key]

    def is_allowed(self, key: str) -> bool:
        """Record a request for ``key`` if it fits in the current window."""
        now = self._now_ms()
        self._prune(now)
        valid = self._valid_requests(key, now)

        if len(valid) >= self.max_requests:
            self._requests[key] = valid
            return False

        valid.append(now)
        self._requests[key] = valid
        return True

    def get_remaining_requests(self, key: str) -> int:
        now = self._now_ms()
        return max(0, self.max_requests - len(self._valid_requests(key, now)))


class CostTracker:
    """Accumulates estimated spend against a daily USD budget."""

    def __init__(self, daily_limit: float = 50.0, today: Callable[[], date] = date.today):
        self.daily_limit = daily_limit
        self._today = today
        self._day = today()
        self.total_cost = 0.0
        self.request_count = 0

    def _roll_day(self) -> None:
        current = self._today()
        if current != self._day:
            self._day = current
            self.total_cost = 0.0
            self.request_count = 0

    def track_request(self, cost: Optional[float] = None) -> None:
        self._roll_day()
        self.request_count += 1
        if cost:
            self.total_cost += cost

    def is_within_daily_limit(self) -> bool:
        self._roll_day()
        return self.total_cost < self.daily_limit

    def get_metrics(self) -> Dict[str, float]:
        self._roll_day()
        return {
            "total_cost": self.total_cost,
            "request_count": self.request_count,
            "remaining_budget": self.daily_limit - self.total_cost,
        }
