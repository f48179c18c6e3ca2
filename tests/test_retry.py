"""Tests for blogcrm.github.retry — linear backoff."""

from unittest.mock import AsyncMock, patch

import pytest

from blogcrm.github.retry import retry_async


class Boom(Exception):
    pass


class TestRetryAsync:
    async def test_returns_first_success_without_sleeping(self):
        fn = AsyncMock(return_value="ok")
        with patch("blogcrm.github.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry_async(fn, max_attempts=3, delay=1.0) == "ok"
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    async def test_linear_backoff_then_success(self):
        fn = AsyncMock(side_effect=[Boom(), Boom(), "ok"])
        with patch("blogcrm.github.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry_async(fn, max_attempts=3, delay=1.0) == "ok"
        assert fn.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    async def test_raises_last_error_after_max_attempts(self):
        errors = [Boom("first"), Boom("second"), Boom("third")]
        fn = AsyncMock(side_effect=errors)
        with patch("blogcrm.github.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(Boom, match="third"):
                await retry_async(fn, max_attempts=3, delay=0.5)
        assert fn.await_count == 3

    async def test_non_retryable_error_raised_immediately(self):
        fn = AsyncMock(side_effect=[ValueError("bad input"), "ok"])
        with patch("blogcrm.github.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(ValueError):
                await retry_async(
                    fn, max_attempts=3, should_retry=lambda e: isinstance(e, Boom)
                )
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    async def test_single_attempt_never_sleeps(self):
        fn = AsyncMock(side_effect=Boom())
        with patch("blogcrm.github.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(Boom):
                await retry_async(fn, max_attempts=1)
        sleep.assert_not_awaited()

    async def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            await retry_async(AsyncMock(), max_attempts=0)
