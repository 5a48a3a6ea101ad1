"""Delivery state machine.

    PENDING -> ATTEMPTING(1) -> DELIVERED(n)
                             -> RETRYING(n) -> ATTEMPTING(n + 1) -> ...
                             -> FAILED(max_attempts)

The transitions are pure so the retry decision table can be tested
without I/O or sleeping; the deliverer is the thin driver around them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from courier.models import DeliveryStatus
    from courier.webhooks.attempt import AttemptResult


class DeliveryPhase(str, Enum):
    """Where a delivery is in its lifecycle."""

    PENDING = "pending"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    DELIVERED = "delivered"
    FAILED = "failed"


TERMINAL_PHASES = frozenset({DeliveryPhase.DELIVERED, DeliveryPhase.FAILED})


@dataclass(frozen=True)
class DeliveryState:
    """Phase plus the number of the current (or last) attempt."""

    phase: DeliveryPhase = DeliveryPhase.PENDING
    attempt: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def ledger_status(self) -> DeliveryStatus:
        """Status as stored in the ledger row."""
        if self.phase == DeliveryPhase.ATTEMPTING:
            # An in-flight attempt has not changed what the ledger says yet
            return "pending" if self.attempt <= 1 else "retrying"
        return self.phase.value  # type: ignore[return-value]


def begin_attempt(state: DeliveryState) -> DeliveryState:
    """Start the next attempt from PENDING or RETRYING."""
    if state.phase not in (DeliveryPhase.PENDING, DeliveryPhase.RETRYING):
        raise ValueError(f"Cannot start an attempt from {state.phase.value}")
    return DeliveryState(phase=DeliveryPhase.ATTEMPTING, attempt=state.attempt + 1)


def next_state(state: DeliveryState, result: AttemptResult, max_attempts: int) -> DeliveryState:
    """Apply the outcome of an attempt cycle.

    Args:
        state: Current state; must be ATTEMPTING.
        result: Outcome of the cycle (GET, or the POST fallback).
        max_attempts: Attempt budget for the delivery.

    Returns:
        DELIVERED on success, RETRYING while attempts remain, else FAILED.
    """
    if state.phase != DeliveryPhase.ATTEMPTING:
        raise ValueError(f"No attempt in progress in {state.phase.value}")
    if result.succeeded:
        return DeliveryState(phase=DeliveryPhase.DELIVERED, attempt=state.attempt)
    if state.attempt < max_attempts:
        return DeliveryState(phase=DeliveryPhase.RETRYING, attempt=state.attempt)
    return DeliveryState(phase=DeliveryPhase.FAILED, attempt=state.attempt)


def backoff_delay_ms(attempt: int, delays_ms: Sequence[int]) -> int:
    """Delay after failed attempt ``attempt`` (1-based).

    The schedule clamps to its last entry once attempts outrun it.
    """
    if not delays_ms:
        raise ValueError("delays_ms must not be empty")
    return delays_ms[min(attempt - 1, len(delays_ms) - 1)]
