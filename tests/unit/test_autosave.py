"""Debounced auto-save trigger tests."""

import asyncio
import logging

import pytest

from onboardkit.autosave import DebouncedSaveTrigger


class Counter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


def test_burst_of_bumps_saves_once(manual_loop):
    save = Counter()
    trigger = DebouncedSaveTrigger(save, 750, loop=manual_loop)

    for _ in range(10):
        trigger.bump()
        manual_loop.advance(0.5)
    assert save.calls == 0
    assert trigger.is_pending

    manual_loop.advance(0.75)
    assert save.calls == 1
    assert not trigger.is_pending

    manual_loop.advance(10)
    assert save.calls == 1


def test_only_last_bump_counts(manual_loop):
    save = Counter()
    trigger = DebouncedSaveTrigger(save, 750, loop=manual_loop)

    trigger.bump()
    manual_loop.advance(0.7)
    trigger.bump()
    manual_loop.advance(0.7)
    assert save.calls == 0
    assert manual_loop.pending == 1

    manual_loop.advance(0.1)
    assert save.calls == 1


def test_flush_now_saves_synchronously_and_cancels(manual_loop):
    save = Counter()
    trigger = DebouncedSaveTrigger(save, 750, loop=manual_loop)

    trigger.bump()
    assert trigger.flush_now() is True
    assert save.calls == 1
    assert not trigger.is_pending

    manual_loop.advance(5)
    assert save.calls == 1

    # also when nothing is pending
    trigger.flush_now()
    assert save.calls == 2


def test_cancel_drops_pending_save(manual_loop):
    save = Counter()
    trigger = DebouncedSaveTrigger(save, 750, loop=manual_loop)

    trigger.bump()
    trigger.cancel()
    manual_loop.advance(5)
    assert save.calls == 0


def test_callback_failure_is_logged_and_trigger_survives(manual_loop, caplog):
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise OSError("disk full")

    trigger = DebouncedSaveTrigger(flaky, 750, loop=manual_loop)
    trigger.bump()
    with caplog.at_level(logging.ERROR, logger="onboardkit.autosave"):
        manual_loop.advance(1)
    assert "Auto-save callback failed" in caplog.text

    assert trigger.flush_now() is True
    assert len(calls) == 2


def test_on_saved_fires_after_successful_save(manual_loop):
    saved = Counter()
    trigger = DebouncedSaveTrigger(lambda: None, 750, loop=manual_loop, on_saved=saved)
    trigger.bump()
    manual_loop.advance(1)
    trigger.flush_now()
    assert saved.calls == 2


def test_dispose_stops_timer_without_saving(manual_loop):
    save = Counter()
    trigger = DebouncedSaveTrigger(save, 750, loop=manual_loop)
    trigger.bump()
    trigger.dispose()
    manual_loop.advance(5)

    assert save.calls == 0
    assert trigger.is_disposed
    trigger.bump()
    assert trigger.flush_now() is False
    assert save.calls == 0


def test_non_positive_interval_falls_back_to_default():
    assert DebouncedSaveTrigger(lambda: None, 0).interval_ms == 750
    assert DebouncedSaveTrigger(lambda: None, -5).interval_ms == 750


@pytest.mark.asyncio
async def test_runs_on_running_event_loop():
    save = Counter()
    trigger = DebouncedSaveTrigger(save, 20)

    trigger.bump()
    await asyncio.sleep(0.005)
    trigger.bump()
    await asyncio.sleep(0.1)

    assert save.calls == 1
    assert not trigger.is_pending
