"""
Custody reference model
=======================

In-process rendition of the AlgoCustody state machine. The host supplies the
caller identity and the current time on every call, and an in-memory
``Ledger`` stands in for the application account.

Usage:

    ledger = Ledger()
    custody = CustodyState("HEIR", 3, creator="OWNER", now=t0, ledger=ledger)
    custody.withdraw(1, caller="OWNER", now=t0 + DAY_SECONDS)
    custody.claim_inheritance("NEXT", caller="HEIR", now=custody.period_end_at + 1)

Each operation validates every precondition before touching state, and rolls
back to the pre-call snapshot if the ledger transfer fails.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Union

from contracts.constants import DURATION, STATUS_ALIVE, STATUS_CLAIMABLE
from contracts.errors import (
    NotEnoughBalance,
    NotHeir,
    NotOwner,
    PeriodEnded,
    PeriodNotEnded,
)

logger = logging.getLogger(__name__)

Identity = Optional[Hashable]


@dataclass(frozen=True)
class Withdraw:
    amount: int
    period_end_at: int


@dataclass(frozen=True)
class Inheritance:
    owner: Identity
    heir: Identity


Event = Union[Withdraw, Inheritance]


class Ledger:
    """Per-identity balances credited by custody payouts."""

    def __init__(
        self,
        balances: Optional[Dict[Identity, int]] = None,
        on_transfer: Optional[Callable[[Identity, int], None]] = None,
    ):
        self.balances: Dict[Identity, int] = dict(balances or {})
        self.on_transfer = on_transfer

    def balance_of(self, identity: Identity) -> int:
        return self.balances.get(identity, 0)

    def transfer(self, to: Identity, amount: int) -> None:
        """Credit ``amount`` to ``to``, then run the transfer hook.

        The credit is reverted if the hook raises.
        """
        self.balances[to] = self.balance_of(to) + amount
        if self.on_transfer is None:
            return
        try:
            self.on_transfer(to, amount)
        except Exception:
            self.balances[to] -= amount
            raise


def _require_amount(value: int, what: str) -> None:
    if value < 0:
        raise ValueError(f"{what} must be non-negative, got {value}")


class CustodyState:
    """Owner / heir / deadline record of one custody instance."""

    duration = DURATION

    def __init__(
        self,
        heir: Identity,
        funding: int,
        *,
        creator: Identity,
        now: int,
        ledger: Optional[Ledger] = None,
    ):
        _require_amount(funding, "funding")
        self._owner = creator
        self._heir = heir
        self._period_end_at = now + self.duration
        self._balance = funding
        self.ledger = ledger if ledger is not None else Ledger()
        self.events: List[Event] = []
        logger.info(
            "Custody created: owner=%r heir=%r funding=%d period_end_at=%d",
            creator, heir, funding, self._period_end_at,
        )

    def __repr__(self):
        return (
            f"CustodyState(owner={self._owner!r}, heir={self._heir!r}, "
            f"period_end_at={self._period_end_at}, balance={self._balance})"
        )

    # ── Read-only accessors ──────────────────────────────────────────────────

    @property
    def owner(self) -> Identity:
        return self._owner

    @property
    def heir(self) -> Identity:
        return self._heir

    @property
    def period_end_at(self) -> int:
        return self._period_end_at

    @property
    def balance(self) -> int:
        return self._balance

    def status(self, now: int) -> str:
        """ALIVE while the owner may still act, CLAIMABLE once the heir may."""
        return STATUS_ALIVE if now <= self._period_end_at else STATUS_CLAIMABLE

    def time_remaining(self, now: int) -> int:
        """Seconds until the deadline. Returns 0 once it is reached."""
        return max(0, self._period_end_at - now)

    # ── Guards ───────────────────────────────────────────────────────────────

    def _require_owner(self, caller: Identity) -> None:
        if caller != self._owner:
            logger.debug("Rejected: %r is not the owner", caller)
            raise NotOwner(caller)

    def _require_heir(self, caller: Identity) -> None:
        if caller != self._heir:
            logger.debug("Rejected: %r is not the heir", caller)
            raise NotHeir(caller)

    def _require_period_not_ended(self, now: int) -> None:
        if now > self._period_end_at:
            logger.debug("Rejected: period ended at %d, now %d", self._period_end_at, now)
            raise PeriodEnded(self._period_end_at, now)

    def _require_period_ended(self, now: int) -> None:
        if now <= self._period_end_at:
            logger.debug("Rejected: period ends at %d, now %d", self._period_end_at, now)
            raise PeriodNotEnded(self._period_end_at, now)

    def _emit(self, event: Event) -> Event:
        self.events.append(event)
        logger.info("Event %r", event)
        return event

    # ── Operations ───────────────────────────────────────────────────────────

    def withdraw(self, amount: int, *, caller: Identity, now: int) -> Withdraw:
        """Pay ``amount`` to the owner and extend the deadline."""
        self._require_owner(caller)
        self._require_period_not_ended(now)
        _require_amount(amount, "amount")
        if amount > self._balance:
            logger.debug("Rejected: balance %d < requested %d", self._balance, amount)
            raise NotEnoughBalance(self._balance, amount)

        snapshot = (self._owner, self._heir, self._period_end_at, self._balance, len(self.events))
        # Nested payouts made by the transfer hook are undone with this one.
        ledger_before = dict(self.ledger.balances)
        period_end_at = now + self.duration
        # Deadline must be visible to anything the transfer calls back into.
        self._period_end_at = period_end_at
        self._balance -= amount
        try:
            self.ledger.transfer(self._owner, amount)
        except Exception:
            self._owner, self._heir, self._period_end_at, self._balance, n_events = snapshot
            del self.events[n_events:]
            self.ledger.balances = ledger_before
            raise
        return self._emit(Withdraw(amount, period_end_at))

    def reset_period(self, *, caller: Identity, now: int) -> Withdraw:
        """Proof of life without moving funds."""
        self._require_owner(caller)
        self._require_period_not_ended(now)
        self._period_end_at = now + self.duration
        return self._emit(Withdraw(0, self._period_end_at))

    def claim_inheritance(self, new_heir: Identity, *, caller: Identity, now: int) -> Inheritance:
        """Heir takes over custody once the deadline has strictly passed."""
        self._require_heir(caller)
        self._require_period_ended(now)
        self._owner = self._heir
        self._heir = new_heir
        self._period_end_at = now + self.duration
        return self._emit(Inheritance(self._owner, self._heir))
