"""
Access Gate

PIN lock in front of the rest of the app.

States:
    AWAITING_FIRST_ENTRY   locked, no PIN stored yet
    AWAITING_VERIFICATION  locked, PIN stored
    PIN_MISMATCH           locked, wrong PIN shown until the reset fires
    UNLOCKED

The gate always starts locked. Digits accumulate in a buffer of exactly
`pin_length` characters; other characters are dropped. When the buffer is
full the gate either adopts it as the new PIN (first run), unlocks, or
enters PIN_MISMATCH and schedules a reset that clears the buffer.

There is no attempt counter and no lockout: a wrong PIN only costs the
reset delay.
"""

import asyncio
import hmac
from enum import Enum
from typing import Callable, Optional, Protocol

from taka_tracker.config import get_settings
from taka_tracker.models.preferences import Preferences
from taka_tracker.telemetry import get_logger


class GateState(str, Enum):
    AWAITING_FIRST_ENTRY = "awaiting_first_entry"
    AWAITING_VERIFICATION = "awaiting_verification"
    PIN_MISMATCH = "pin_mismatch"
    UNLOCKED = "unlocked"


class GateOutcome(str, Enum):
    """What a single input did."""
    BUFFERED = "buffered"        # digit stored, buffer not full yet
    IGNORED = "ignored"          # input had no effect
    PIN_CREATED = "pin_created"  # first entry adopted as the PIN, unlocked
    UNLOCKED = "unlocked"        # correct PIN
    MISMATCH = "mismatch"        # wrong PIN, reset scheduled
    ERASED = "erased"            # last digit removed


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Run callback after delay seconds on the running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


class AccessGate:
    """
    PIN entry state machine.

    The gate reads and writes the PIN on the shared Preferences object;
    persisting a newly created PIN is the caller's job (see PIN_CREATED).
    """

    def __init__(
        self,
        preferences: Preferences,
        error_delay: Optional[float] = None,
        scheduler: Scheduler = asyncio_scheduler,
        pin_length: Optional[int] = None,
    ):
        settings = get_settings()
        self._preferences = preferences
        self._error_delay = (
            error_delay if error_delay is not None else settings.pin_error_delay_seconds
        )
        self._schedule = scheduler
        self._pin_length = pin_length or settings.pin_length
        self._buffer = ""
        self._unlocked = False
        self._error = False
        self._reset_handle: Optional[Cancellable] = None
        self._closed = False
        self._logger = get_logger("access.gate")

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> GateState:
        if self._unlocked:
            return GateState.UNLOCKED
        if self._error:
            return GateState.PIN_MISMATCH
        if self._preferences.has_pin:
            return GateState.AWAITING_VERIFICATION
        return GateState.AWAITING_FIRST_ENTRY

    @property
    def is_locked(self) -> bool:
        return not self._unlocked

    @property
    def entered_digits(self) -> int:
        """How many digits are in the buffer (for drawing the PIN dots)."""
        return len(self._buffer)

    @property
    def pin_length(self) -> int:
        return self._pin_length

    @property
    def reset_pending(self) -> bool:
        return self._reset_handle is not None

    # =========================================================================
    # INPUT
    # =========================================================================

    def enter_digit(self, char: str) -> GateOutcome:
        """Feed one character of PIN input."""
        if self._closed or self._unlocked or self._error:
            return GateOutcome.IGNORED
        if len(char) != 1 or char not in "0123456789":
            return GateOutcome.IGNORED
        if len(self._buffer) >= self._pin_length:
            return GateOutcome.IGNORED

        self._buffer += char
        if len(self._buffer) < self._pin_length:
            return GateOutcome.BUFFERED
        return self._submit()

    def enter(self, digits: str) -> GateOutcome:
        """
        Feed a string of input one character at a time.

        Returns the outcome of the last character that had an effect,
        or IGNORED if none did.
        """
        outcome = GateOutcome.IGNORED
        for char in digits:
            result = self.enter_digit(char)
            if result != GateOutcome.IGNORED:
                outcome = result
        return outcome

    def delete_last(self) -> GateOutcome:
        """
        Remove the last digit.

        While a wrong PIN is displayed this also dismisses the error and
        cancels the pending reset, leaving the first digits in place.
        """
        if self._closed or self._unlocked or not self._buffer:
            return GateOutcome.IGNORED
        self._cancel_reset()
        self._error = False
        self._buffer = self._buffer[:-1]
        return GateOutcome.ERASED

    def lock(self) -> None:
        """Lock from any state, discarding partial input."""
        self._cancel_reset()
        self._buffer = ""
        self._error = False
        if self._unlocked:
            self._logger.info("gate_locked")
        self._unlocked = False

    def close(self) -> None:
        """Tear down: cancel the pending reset so it never fires."""
        self._cancel_reset()
        self._closed = True

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _submit(self) -> GateOutcome:
        entered = self._buffer

        if not self._preferences.has_pin:
            self._preferences.pin = entered
            self._buffer = ""
            self._unlocked = True
            self._logger.info("pin_created")
            return GateOutcome.PIN_CREATED

        if hmac.compare_digest(entered, self._preferences.pin):
            self._buffer = ""
            self._unlocked = True
            self._logger.info("gate_unlocked")
            return GateOutcome.UNLOCKED

        self._error = True
        self._reset_handle = self._schedule(self._error_delay, self._on_reset)
        self._logger.info("pin_mismatch", reset_after_seconds=self._error_delay)
        return GateOutcome.MISMATCH

    def _on_reset(self) -> None:
        self._reset_handle = None
        if self._closed:
            return
        self._buffer = ""
        self._error = False

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
