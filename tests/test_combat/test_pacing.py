"""Tests for src/tile_rpg/combat/pacing.py."""
from __future__ import annotations

from tile_rpg.combat.pacing import ImmediateScheduler, ManualScheduler, PendingCall


class TestPendingCall:
    def test_fires_once(self):
        calls = []
        call = PendingCall(0.0, lambda: calls.append(1))
        call.fire()
        call.fire()
        assert calls == [1]
        assert not call.active

    def test_cancelled_never_fires(self):
        calls = []
        call = PendingCall(0.0, lambda: calls.append(1))
        call.cancel()
        call.fire()
        assert calls == []


class TestImmediateScheduler:
    def test_runs_now(self):
        calls = []
        call = ImmediateScheduler().call_later(5.0, lambda: calls.append("x"))
        assert calls == ["x"]
        assert call.fired


class TestManualScheduler:
    def test_waits_for_due_time(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(1.0, lambda: calls.append("a"))
        assert scheduler.advance(0.5) == 0
        assert scheduler.advance(0.5) == 1
        assert calls == ["a"]
        assert scheduler.pending == []

    def test_fires_in_due_order(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(2.0, lambda: calls.append("late"))
        scheduler.call_later(1.0, lambda: calls.append("early"))
        scheduler.advance(3.0)
        assert calls == ["early", "late"]

    def test_cancelled_call_is_skipped(self):
        scheduler = ManualScheduler()
        calls = []
        call = scheduler.call_later(1.0, lambda: calls.append("a"))
        call.cancel()
        assert scheduler.pending == []
        assert scheduler.advance(2.0) == 0
        assert calls == []

    def test_callback_cancelling_a_later_call(self):
        scheduler = ManualScheduler()
        calls = []
        second = scheduler.call_later(1.0, lambda: calls.append("second"))
        scheduler.call_later(0.5, second.cancel)
        assert scheduler.advance(1.0) == 1
        assert calls == []

    def test_run_all_chains(self):
        scheduler = ManualScheduler()
        calls = []

        def first():
            calls.append("first")
            scheduler.call_later(10.0, lambda: calls.append("second"))

        scheduler.call_later(1.0, first)
        assert scheduler.run_all() == 2
        assert calls == ["first", "second"]
        assert scheduler.now == 11.0
