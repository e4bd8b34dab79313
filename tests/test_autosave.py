"""Tests for AutosaveCoordinator: debounce, serialization, failure handling."""

import asyncio

import pytest
from draftline.autosave import AutosaveCoordinator
from draftline.errors import ErrorReport

DELAY = 0.05


class _Recorder:
    """Persist callable that records calls and can be made slow or failing."""

    def __init__(self, duration: float = 0.0, fail: bool = False) -> None:
        self.duration = duration
        self.fail = fail
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def __call__(self) -> str:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.duration)
            if self.fail:
                raise RuntimeError("store unavailable")
            return f"saved-{self.calls}"
        finally:
            self.active -= 1


class TestDebounce:
    def test_single_save_after_burst(self):
        async def scenario():
            persist = _Recorder()
            saver = AutosaveCoordinator(persist, delay=DELAY)
            for _ in range(5):
                saver.notify_change()
                await asyncio.sleep(DELAY / 5)
            assert persist.calls == 0
            await saver.wait_idle()
            return persist, saver

        persist, saver = asyncio.run(scenario())
        assert persist.calls == 1
        assert saver.last_saved_at is not None

    def test_fires_delay_after_last_edit(self):
        async def scenario():
            loop = asyncio.get_running_loop()
            fired_at: list[float] = []

            async def persist():
                fired_at.append(loop.time())
                return "ok"

            saver = AutosaveCoordinator(persist, delay=DELAY * 2)
            for _ in range(3):
                saver.notify_change()
                last_edit = loop.time()
                await asyncio.sleep(DELAY / 2)
            await saver.wait_idle()
            return fired_at, last_edit

        fired_at, last_edit = asyncio.run(scenario())
        assert len(fired_at) == 1
        assert fired_at[0] - last_edit >= DELAY * 2 * 0.9

    def test_timer_restarts_on_each_change(self):
        async def scenario():
            persist = _Recorder()
            saver = AutosaveCoordinator(persist, delay=DELAY * 2)
            saver.notify_change()
            await asyncio.sleep(DELAY * 1.5)
            saver.notify_change()
            await asyncio.sleep(DELAY * 1.5)
            calls_before_quiet_period = persist.calls
            await saver.wait_idle()
            return calls_before_quiet_period, persist.calls

        before, after = asyncio.run(scenario())
        assert before == 0
        assert after == 1

    def test_pending_flag(self):
        async def scenario():
            saver = AutosaveCoordinator(_Recorder(), delay=DELAY)
            assert not saver.pending
            saver.notify_change()
            assert saver.pending
            await saver.wait_idle()
            return saver.pending

        assert asyncio.run(scenario()) is False

    def test_disabled_never_arms(self):
        async def scenario():
            persist = _Recorder()
            saver = AutosaveCoordinator(persist, delay=DELAY, enabled=False)
            saver.notify_change()
            await asyncio.sleep(DELAY * 2)
            return persist.calls, saver.pending

        assert asyncio.run(scenario()) == (0, False)


class TestSerialization:
    def test_timer_during_inflight_save_is_deferred(self):
        async def scenario():
            persist = _Recorder(duration=DELAY * 3)
            saver = AutosaveCoordinator(persist, delay=DELAY)
            save_task = asyncio.ensure_future(saver.save_now())
            await asyncio.sleep(0)
            assert saver.in_flight
            saver.notify_change()
            await save_task
            await saver.wait_idle()
            return persist

        persist = asyncio.run(scenario())
        assert persist.calls == 2
        assert persist.max_active == 1

    def test_new_change_supersedes_deferred_save(self):
        async def scenario():
            persist = _Recorder(duration=DELAY * 8)
            saver = AutosaveCoordinator(persist, delay=DELAY * 4)
            save_task = asyncio.ensure_future(saver.save_now())
            await asyncio.sleep(0)
            saver.notify_change()
            # The first timer fires (and defers) while the save is in flight.
            await asyncio.sleep(DELAY * 6)
            saver.notify_change()
            await save_task
            await saver.wait_idle()
            return persist

        persist = asyncio.run(scenario())
        assert persist.calls == 2
        assert persist.max_active == 1

    def test_save_now_cancels_pending_timer(self):
        async def scenario():
            persist = _Recorder()
            saver = AutosaveCoordinator(persist, delay=DELAY)
            saver.notify_change()
            result = await saver.save_now()
            await asyncio.sleep(DELAY * 2)
            return result, persist.calls

        assert asyncio.run(scenario()) == ("saved-1", 1)

    def test_save_now_with_one_off_persist(self):
        async def scenario():
            persist = _Recorder()
            saver = AutosaveCoordinator(persist, delay=DELAY)

            async def publish():
                return "published"

            return await saver.save_now(publish), persist.calls

        assert asyncio.run(scenario()) == ("published", 0)


class TestFailures:
    def test_background_failure_is_reported_not_raised(self, caplog):
        async def scenario():
            report = ErrorReport()
            saver = AutosaveCoordinator(
                _Recorder(fail=True), delay=DELAY, report=report, label="doc-1"
            )
            saver.notify_change()
            await saver.wait_idle()
            return report, saver

        report, saver = asyncio.run(scenario())
        assert report.has_errors
        assert report.errors[0].stage == "autosave"
        assert report.errors[0].source == "doc-1"
        assert report.errors[0].error_type == "persist_error"
        assert saver.last_saved_at is None
        assert "Autosave failed for doc-1" in caplog.text

    def test_save_now_propagates_failure(self):
        async def scenario():
            saver = AutosaveCoordinator(_Recorder(fail=True), delay=DELAY)
            await saver.save_now()

        with pytest.raises(RuntimeError, match="store unavailable"):
            asyncio.run(scenario())


class TestClose:
    def test_close_cancels_pending_timer(self):
        async def scenario():
            persist = _Recorder()
            saver = AutosaveCoordinator(persist, delay=DELAY)
            saver.notify_change()
            saver.close()
            await asyncio.sleep(DELAY * 2)
            return persist.calls, saver.closed

        assert asyncio.run(scenario()) == (0, True)

    def test_inflight_result_discarded_after_close(self):
        async def scenario():
            saver = AutosaveCoordinator(_Recorder(duration=DELAY), delay=DELAY)
            task = asyncio.ensure_future(saver.save_now())
            await asyncio.sleep(0)
            saver.close()
            return await task, saver.last_saved_at

        assert asyncio.run(scenario()) == (None, None)

    def test_changes_after_close_ignored(self):
        async def scenario():
            saver = AutosaveCoordinator(_Recorder(), delay=DELAY)
            saver.close()
            saver.notify_change()
            return saver.pending

        assert asyncio.run(scenario()) is False
