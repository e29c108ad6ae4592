"""Tests for the PIN access gate."""

import asyncio

import pytest

from taka_tracker.access import AccessGate, GateOutcome, GateState
from taka_tracker.models import Preferences


@pytest.fixture
def preferences():
    return Preferences()


@pytest.fixture
def gate(preferences, scheduler):
    return AccessGate(preferences, error_delay=0.8, scheduler=scheduler, pin_length=4)


class TestFirstEntry:
    """Tests for the first run, when no PIN exists yet."""

    def test_starts_locked(self, gate):
        assert gate.is_locked
        assert gate.state == GateState.AWAITING_FIRST_ENTRY

    def test_first_four_digits_become_the_pin(self, gate, preferences):
        """Test the first complete entry is adopted and unlocks."""
        assert gate.enter("123") == GateOutcome.BUFFERED
        assert gate.enter_digit("4") == GateOutcome.PIN_CREATED
        assert preferences.pin == "1234"
        assert gate.state == GateState.UNLOCKED


class TestVerification:
    """Tests for unlocking with a stored PIN."""

    @pytest.fixture
    def preferences(self):
        return Preferences(pin="1234")

    def test_correct_pin_unlocks(self, gate):
        assert gate.state == GateState.AWAITING_VERIFICATION
        assert gate.enter("1234") == GateOutcome.UNLOCKED
        assert not gate.is_locked

    def test_wrong_pin_shows_error_then_resets(self, gate, scheduler):
        """Test a mismatch schedules a reset that clears the entry."""
        assert gate.enter("0000") == GateOutcome.MISMATCH
        assert gate.state == GateState.PIN_MISMATCH
        assert gate.entered_digits == 4
        assert scheduler.pending[0].delay == 0.8

        scheduler.fire_all()

        assert gate.state == GateState.AWAITING_VERIFICATION
        assert gate.entered_digits == 0
        assert gate.enter("1234") == GateOutcome.UNLOCKED

    def test_digits_ignored_while_error_shown(self, gate):
        gate.enter("0000")
        assert gate.enter_digit("1") == GateOutcome.IGNORED
        assert gate.entered_digits == 4

    def test_delete_dismisses_error(self, gate, scheduler):
        """Test deleting during the error cancels the pending reset."""
        gate.enter("1230")
        assert gate.delete_last() == GateOutcome.ERASED
        assert scheduler.pending == []
        assert gate.state == GateState.AWAITING_VERIFICATION
        assert gate.enter_digit("4") == GateOutcome.UNLOCKED

    def test_non_digits_ignored(self, gate):
        assert gate.enter_digit("a") == GateOutcome.IGNORED
        assert gate.enter_digit("12") == GateOutcome.IGNORED
        assert gate.enter("1-2-3-4") == GateOutcome.UNLOCKED

    def test_lock_after_unlock(self, gate):
        gate.enter("1234")
        gate.lock()
        assert gate.is_locked
        assert gate.state == GateState.AWAITING_VERIFICATION
        assert gate.entered_digits == 0

    def test_close_cancels_pending_reset(self, gate, scheduler):
        """Test no callback fires after teardown."""
        gate.enter("9999")
        handle = scheduler.handles[0]
        gate.close()
        assert handle.cancelled
        assert gate.enter("1234") == GateOutcome.IGNORED

    def test_late_reset_after_close_is_harmless(self, gate, scheduler):
        """Test a reset that fires anyway does not touch a closed gate."""
        gate.enter("9999")
        callback = scheduler.handles[0].callback
        gate.close()
        callback()
        assert gate.entered_digits == 4

    def test_no_lockout_after_many_failures(self, gate, scheduler):
        for _ in range(10):
            gate.enter("0000")
            scheduler.fire_all()
        assert gate.enter("1234") == GateOutcome.UNLOCKED


class TestEventLoopTimer:
    """Tests for the default scheduler on a running event loop."""

    @pytest.mark.asyncio
    async def test_mismatch_resets_after_real_delay(self):
        gate = AccessGate(Preferences(pin="1234"), error_delay=0.05, pin_length=4)

        assert gate.enter("0000") == GateOutcome.MISMATCH
        assert gate.state == GateState.PIN_MISMATCH

        await asyncio.sleep(0.1)

        assert gate.state == GateState.AWAITING_VERIFICATION
        assert gate.entered_digits == 0
        assert gate.enter("1234") == GateOutcome.UNLOCKED
