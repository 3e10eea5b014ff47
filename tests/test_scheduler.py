"""Tests for periodic and single-shot scheduling."""

from __future__ import annotations

import threading
import time

import pytest

from experiments.scheduler import CancellationToken, PeriodicTask, single_shot


class TestPeriodicTask:
    def test_runs_until_max_ticks(self) -> None:
        calls = []
        task = PeriodicTask(0.0, calls.append, max_ticks=3)

        assert task.run() == 3
        assert calls == [0, 1, 2]

    def test_cancel_from_callback_stops_after_current_tick(self) -> None:
        token = CancellationToken()
        calls = []

        def callback(tick: int) -> None:
            calls.append(tick)
            if tick == 1:
                token.cancel()

        ticks = PeriodicTask(0.0, callback, token=token).run()

        assert ticks == 2
        assert calls == [0, 1]

    def test_cancelled_token_skips_all_ticks(self) -> None:
        token = CancellationToken()
        token.cancel()
        calls = []

        assert PeriodicTask(0.0, calls.append, token=token, max_ticks=5).run() == 0
        assert calls == []

    def test_cancel_interrupts_wait(self) -> None:
        token = CancellationToken()
        calls = []
        timer = threading.Timer(0.05, token.cancel)
        timer.start()

        started = time.monotonic()
        try:
            ticks = PeriodicTask(30.0, calls.append, token=token).run()
        finally:
            timer.cancel()

        assert ticks == 1
        assert calls == [0]
        assert time.monotonic() - started < 5.0

    def test_delayed_start_observes_cancellation(self) -> None:
        token = CancellationToken()
        token.cancel()
        calls = []

        assert PeriodicTask(10.0, calls.append, token=token, immediate=False).run() == 0
        assert calls == []

    def test_callback_errors_propagate(self) -> None:
        def callback(tick: int) -> None:
            raise RuntimeError("boom")

        task = PeriodicTask(0.0, callback, max_ticks=2)
        with pytest.raises(RuntimeError):
            task.run()
        assert task.ticks == 0

    @pytest.mark.parametrize("kwargs", [{"interval_s": -1.0}, {"interval_s": 1.0, "max_ticks": 0}])
    def test_invalid_arguments(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            PeriodicTask(callback=lambda tick: None, **kwargs)


def test_single_shot_runs_once() -> None:
    calls = []

    assert single_shot(calls.append) == 1
    assert calls == [0]


def test_single_shot_respects_cancellation() -> None:
    token = CancellationToken()
    token.cancel()
    calls = []

    assert single_shot(calls.append, token) == 0
    assert calls == []
