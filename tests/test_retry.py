"""
Retry controller: bounded attempts, capped exponential backoff, original error kept.
"""
import asyncio

import pytest

from productboard_mcp.api.errors import (
    APIAuthenticationError,
    APINetworkError,
    APIRateLimitError,
    APIServerError,
    APIValidationError,
    ErrorKind,
)
from productboard_mcp.utils.retry import RetryHandler, RetryPolicy


class FlakyCall:
    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


class TestRetryPolicy:
    def test_delays_double(self):
        policy = RetryPolicy(max_attempts=5, initial_delay=1.0, max_delay=30.0)
        assert [policy.delay_for(k) for k in range(1, 5)] == [1.0, 2.0, 4.0, 8.0]

    def test_delay_capped(self):
        policy = RetryPolicy(max_attempts=10, initial_delay=1.0, max_delay=5.0)
        assert policy.delay_for(4) == 5.0
        assert policy.delay_for(9) == 5.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"initial_delay": 0},
            {"initial_delay": 5.0, "max_delay": 1.0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)


class TestRetryHandler:
    @pytest.mark.asyncio
    async def test_success_first_try(self, sleep_recorder):
        handler = RetryHandler(RetryPolicy(), sleep=sleep_recorder)
        call = FlakyCall([])
        assert await handler.with_retries(call) == "ok"
        assert call.calls == 1
        assert sleep_recorder.calls == []
        assert handler.last_attempts == 1

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, sleep_recorder):
        handler = RetryHandler(RetryPolicy(max_attempts=3), sleep=sleep_recorder)
        call = FlakyCall([APIServerError("down", status_code=503), APINetworkError("reset")])
        assert await handler.with_retries(call) == "ok"
        assert call.calls == 3
        assert sleep_recorder.calls == [1.0, 2.0]
        assert handler.last_attempts == 3

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_original_error(self, sleep_recorder):
        handler = RetryHandler(RetryPolicy(max_attempts=3), sleep=sleep_recorder)
        errors = [APIServerError(f"down {i}", status_code=500) for i in range(3)]
        call = FlakyCall(errors)

        with pytest.raises(APIServerError) as exc_info:
            await handler.with_retries(call)

        assert exc_info.value is errors[-1]
        assert exc_info.value.kind == ErrorKind.SERVER_ERROR
        assert exc_info.value.attempts == 3
        assert call.calls == 3
        assert sleep_recorder.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            APIValidationError("bad"),
            APIAuthenticationError("nope"),
        ],
    )
    async def test_non_retryable_fails_immediately(self, sleep_recorder, error):
        handler = RetryHandler(RetryPolicy(max_attempts=5), sleep=sleep_recorder)
        call = FlakyCall([error])

        with pytest.raises(type(error)) as exc_info:
            await handler.with_retries(call)

        assert exc_info.value is error
        assert exc_info.value.attempts == 1
        assert call.calls == 1
        assert sleep_recorder.calls == []

    @pytest.mark.asyncio
    async def test_unclassified_exception_not_retried(self, sleep_recorder):
        handler = RetryHandler(RetryPolicy(max_attempts=3), sleep=sleep_recorder)
        call = FlakyCall([KeyError("boom")])

        with pytest.raises(KeyError):
            await handler.with_retries(call)
        assert call.calls == 1
        assert sleep_recorder.calls == []

    @pytest.mark.asyncio
    async def test_rate_limit_uses_backoff_not_retry_after(self, sleep_recorder):
        handler = RetryHandler(RetryPolicy(max_attempts=2, initial_delay=0.5), sleep=sleep_recorder)
        call = FlakyCall([APIRateLimitError("slow down", retry_after_seconds=45)])

        assert await handler.with_retries(call) == "ok"
        assert sleep_recorder.calls == [0.5]

    @pytest.mark.asyncio
    async def test_custom_predicate(self, sleep_recorder):
        policy = RetryPolicy(
            max_attempts=3,
            retry_predicate=lambda kind: kind == ErrorKind.NETWORK_FAILURE,
        )
        handler = RetryHandler(policy, sleep=sleep_recorder)
        call = FlakyCall([APIServerError("down", status_code=500)])

        with pytest.raises(APIServerError):
            await handler.with_retries(call)
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_per_call_policy_override(self, sleep_recorder):
        handler = RetryHandler(RetryPolicy(max_attempts=5), sleep=sleep_recorder)
        call = FlakyCall([APINetworkError("a"), APINetworkError("b")])

        with pytest.raises(APINetworkError):
            await handler.with_retries(call, policy=RetryPolicy(max_attempts=2))
        assert call.calls == 2
        assert sleep_recorder.calls == [1.0]

    @pytest.mark.asyncio
    async def test_attempts_never_exceed_max(self, sleep_recorder):
        for max_attempts in range(1, 6):
            handler = RetryHandler(RetryPolicy(max_attempts=max_attempts), sleep=sleep_recorder)
            call = FlakyCall([APINetworkError("x") for _ in range(10)])
            with pytest.raises(APINetworkError):
                await handler.with_retries(call)
            assert call.calls == max_attempts


@pytest.mark.asyncio
async def test_concurrent_calls_keep_their_own_failure_count(sleep_recorder):
    handler = RetryHandler(RetryPolicy(max_attempts=2, initial_delay=1.0), sleep=sleep_recorder)
    failing = FlakyCall([APIServerError("down", status_code=503), APIServerError("down", status_code=503)])
    healthy = FlakyCall([])

    results = await asyncio.gather(
        handler.with_retries(failing),
        handler.with_retries(healthy),
        return_exceptions=True,
    )

    assert isinstance(results[0], APIServerError)
    assert results[0].attempts == 2
    assert results[1] == "ok"
    # shared diagnostic: whichever call finished last
    assert handler.last_attempts == 2
