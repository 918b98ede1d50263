"""Tests for octo.cancellation.CancelToken."""

import asyncio
import gc
import logging
import threading

import pytest

from octo.cancellation import CancelToken, checkpoint


class TestCancelToken:
    def test_initial_state(self):
        token = CancelToken()
        assert not token.cancelled
        assert token.reason is None
        token.raise_if_cancelled()

    def test_cancel_sets_reason_once(self):
        token = CancelToken()
        token.cancel("user pressed esc")
        token.cancel("second call ignored")
        assert token.cancelled
        assert token.reason == "user pressed esc"
        with pytest.raises(asyncio.CancelledError):
            token.raise_if_cancelled()

    def test_default_reason(self):
        token = CancelToken()
        token.cancel()
        assert token.reason == "Operation aborted"

    @pytest.mark.asyncio
    async def test_guard_returns_result(self):
        async def work():
            return 42

        assert await CancelToken().guard(work()) == 42

    @pytest.mark.asyncio
    async def test_guard_propagates_errors(self):
        async def fail():
            raise FileNotFoundError("missing")

        with pytest.raises(FileNotFoundError):
            await CancelToken().guard(fail())

    @pytest.mark.asyncio
    async def test_guard_interrupts_pending_step(self):
        token = CancelToken()
        started = asyncio.Event()
        finished = False

        async def slow():
            nonlocal finished
            started.set()
            await asyncio.sleep(10)
            finished = True

        task = asyncio.create_task(token.guard(slow()))
        await started.wait()
        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert not finished

    @pytest.mark.asyncio
    async def test_guard_skips_work_when_already_cancelled(self):
        token = CancelToken()
        token.cancel()
        ran = False

        async def work():
            nonlocal ran
            ran = True

        with pytest.raises(asyncio.CancelledError):
            await token.guard(work())
        assert not ran

    @pytest.mark.asyncio
    async def test_cancel_from_other_thread_wakes_guard(self):
        token = CancelToken()

        async def slow():
            await asyncio.sleep(10)

        loop = asyncio.get_running_loop()
        loop.call_later(0.05, lambda: threading.Thread(target=token.cancel, args=("from thread",)).start())

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(token.guard(slow()), timeout=2)
        assert token.reason == "from thread"

    @pytest.mark.asyncio
    async def test_failure_racing_cancel_is_retrieved(self, caplog):
        token = CancelToken()

        async def fail_while_cancelling():
            token.cancel()
            raise OSError("disk gone")

        with caplog.at_level(logging.ERROR, logger="asyncio"):
            with pytest.raises(asyncio.CancelledError):
                await token.guard(fail_while_cancelling())
            gc.collect()

        assert "never retrieved" not in caplog.text


@pytest.mark.asyncio
async def test_checkpoint_without_token():
    async def work():
        return "ok"

    assert await checkpoint(None, work()) == "ok"
