"""
AlgoCustody — Reference Model Test Suite
=========================================
Exercises every transition of contracts.model.CustodyState in-process.

Run:
    pytest tests/test_model.py -v

Test Scenarios:
  1.  construction — owner, heir, deadline, balance
  2.  withdraw — happy path, conservation, deadline reset
  3.  withdraw — reject after deadline, over-balance, non-owner
  4.  reset_period — happy path, repeated resets
  5.  claim_inheritance — happy path, reject before deadline, non-heir
  6.  boundaries at period_end_at and period_end_at + 1
  7.  atomicity — failed transfer rolls back, reentrant callback
  8.  read helpers — status, time_remaining
"""

import pytest

from contracts.constants import DAY_SECONDS, DURATION, STATUS_ALIVE, STATUS_CLAIMABLE
from contracts.errors import (
    CustodyError,
    NotEnoughBalance,
    NotHeir,
    NotOwner,
    PeriodEnded,
    PeriodNotEnded,
)
from contracts.model import CustodyState, Inheritance, Ledger, Withdraw

T0 = 1_700_000_000
OWNER = "OWNER"
HEIR = "HEIR"
NEXT_HEIR = "NEXT_HEIR"
STRANGER = "STRANGER"


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def custody(ledger):
    return CustodyState(HEIR, 3, creator=OWNER, now=T0, ledger=ledger)


def _fields(custody):
    return (custody.owner, custody.heir, custody.period_end_at, custody.balance)


class TestConstruction:
    def test_initial_state(self, custody):
        assert custody.owner == OWNER
        assert custody.heir == HEIR
        assert custody.period_end_at == T0 + DURATION
        assert custody.balance == 3
        assert custody.events == []

    def test_duration_is_thirty_days(self, custody):
        assert custody.duration == DURATION == 30 * DAY_SECONDS

    def test_accepts_any_heir(self):
        assert CustodyState(None, 0, creator=OWNER, now=T0).heir is None
        assert CustodyState(OWNER, 0, creator=OWNER, now=T0).heir == OWNER

    def test_negative_funding_rejected(self):
        with pytest.raises(ValueError):
            CustodyState(HEIR, -1, creator=OWNER, now=T0)


class TestWithdraw:
    def test_scenario_a(self, custody, ledger):
        now = T0 + DAY_SECONDS
        event = custody.withdraw(1, caller=OWNER, now=now)

        assert custody.balance == 2
        assert ledger.balance_of(OWNER) == 1
        assert custody.period_end_at == T0 + DAY_SECONDS + DURATION
        assert event == Withdraw(1, T0 + DAY_SECONDS + DURATION)
        assert custody.events == [event]

    def test_conservation(self, ledger):
        ledger.balances[OWNER] = 10
        custody = CustodyState(HEIR, 100, creator=OWNER, now=T0, ledger=ledger)

        custody.withdraw(37, caller=OWNER, now=T0 + 5)

        assert 100 - custody.balance == 37 == ledger.balance_of(OWNER) - 10

    def test_full_balance(self, custody, ledger):
        custody.withdraw(3, caller=OWNER, now=T0)
        assert custody.balance == 0
        assert ledger.balance_of(OWNER) == 3

    def test_zero_amount(self, custody, ledger):
        event = custody.withdraw(0, caller=OWNER, now=T0 + 10)
        assert event == Withdraw(0, T0 + 10 + DURATION)
        assert custody.balance == 3

    def test_scenario_b_after_deadline(self, custody):
        last_reset = T0 + DAY_SECONDS
        custody.withdraw(1, caller=OWNER, now=last_reset)

        now = last_reset + DURATION + 1
        with pytest.raises(PeriodEnded) as exc_info:
            custody.withdraw(1, caller=OWNER, now=now)
        assert exc_info.value.period_end_at == last_reset + DURATION
        assert exc_info.value.now == now

    def test_scenario_e_not_enough_balance(self, custody, ledger):
        before = _fields(custody)
        with pytest.raises(NotEnoughBalance) as exc_info:
            custody.withdraw(4, caller=OWNER, now=T0 + 1)

        assert exc_info.value.balance == 3
        assert exc_info.value.requested == 4
        assert _fields(custody) == before
        assert ledger.balance_of(OWNER) == 0
        assert custody.events == []

    @pytest.mark.parametrize("caller", [HEIR, STRANGER])
    def test_non_owner_rejected(self, custody, caller):
        with pytest.raises(NotOwner):
            custody.withdraw(1, caller=caller, now=T0 + 1)

    def test_non_owner_checked_before_deadline(self, custody):
        with pytest.raises(NotOwner):
            custody.withdraw(100, caller=STRANGER, now=T0 + DURATION + 1)

    def test_deadline_checked_before_balance(self, custody):
        with pytest.raises(PeriodEnded):
            custody.withdraw(100, caller=OWNER, now=T0 + DURATION + 1)

    def test_negative_amount_rejected(self, custody):
        with pytest.raises(ValueError):
            custody.withdraw(-1, caller=OWNER, now=T0)

    def test_non_owner_with_negative_amount(self, custody):
        with pytest.raises(NotOwner):
            custody.withdraw(-1, caller=STRANGER, now=T0)


class TestResetPeriod:
    def test_reset_moves_deadline(self, custody):
        event = custody.reset_period(caller=OWNER, now=T0 + 100)
        assert custody.period_end_at == T0 + 100 + DURATION
        assert event == Withdraw(0, T0 + 100 + DURATION)

    def test_repeated_resets(self, custody, ledger):
        custody.reset_period(caller=OWNER, now=T0 + 10)
        assert custody.period_end_at == T0 + 10 + DURATION
        custody.reset_period(caller=OWNER, now=T0 + 20)
        assert custody.period_end_at == T0 + 20 + DURATION

        assert (custody.owner, custody.heir, custody.balance) == (OWNER, HEIR, 3)
        assert ledger.balances == {}
        assert len(custody.events) == 2

    @pytest.mark.parametrize("caller", [HEIR, STRANGER])
    def test_non_owner_rejected(self, custody, caller):
        with pytest.raises(NotOwner):
            custody.reset_period(caller=caller, now=T0)
        with pytest.raises(NotOwner):
            custody.reset_period(caller=caller, now=T0 + DURATION + 1)

    def test_after_deadline_rejected(self, custody):
        with pytest.raises(PeriodEnded):
            custody.reset_period(caller=OWNER, now=T0 + DURATION + 1)


class TestClaimInheritance:
    def test_scenario_c(self, custody):
        now = T0 + DURATION + 1
        event = custody.claim_inheritance(NEXT_HEIR, caller=HEIR, now=now)

        assert custody.owner == HEIR
        assert custody.heir == NEXT_HEIR
        assert custody.balance == 3
        assert custody.period_end_at == now + DURATION
        assert event == Inheritance(HEIR, NEXT_HEIR)

    def test_scenario_d_before_deadline(self, custody):
        now = T0 + DURATION - 1
        with pytest.raises(PeriodNotEnded) as exc_info:
            custody.claim_inheritance(NEXT_HEIR, caller=HEIR, now=now)
        assert exc_info.value.period_end_at == T0 + DURATION
        assert exc_info.value.now == now
        assert custody.owner == OWNER

    @pytest.mark.parametrize("caller", [OWNER, STRANGER, NEXT_HEIR])
    def test_non_heir_rejected(self, custody, caller):
        with pytest.raises(NotHeir):
            custody.claim_inheritance(NEXT_HEIR, caller=caller, now=T0 + DURATION + 1)

    @pytest.mark.parametrize("new_heir", [None, HEIR, OWNER])
    def test_new_heir_unrestricted(self, custody, new_heir):
        custody.claim_inheritance(new_heir, caller=HEIR, now=T0 + DURATION + 1)
        assert custody.heir == new_heir

    def test_new_owner_can_withdraw(self, custody, ledger):
        claim_at = T0 + DURATION + 1
        custody.claim_inheritance(NEXT_HEIR, caller=HEIR, now=claim_at)

        with pytest.raises(NotOwner):
            custody.withdraw(1, caller=OWNER, now=claim_at + 1)
        custody.withdraw(2, caller=HEIR, now=claim_at + 1)
        assert ledger.balance_of(HEIR) == 2

    def test_owner_equal_to_heir(self):
        custody = CustodyState(OWNER, 5, creator=OWNER, now=T0)
        custody.withdraw(1, caller=OWNER, now=T0 + 1)
        custody.claim_inheritance(STRANGER, caller=OWNER, now=custody.period_end_at + 1)
        assert (custody.owner, custody.heir) == (OWNER, STRANGER)


class TestBoundaries:
    def test_withdraw_at_deadline(self, custody):
        custody.withdraw(1, caller=OWNER, now=T0 + DURATION)

    def test_reset_at_deadline(self, custody):
        custody.reset_period(caller=OWNER, now=T0 + DURATION)

    def test_owner_ops_one_second_late(self, custody):
        with pytest.raises(PeriodEnded):
            custody.withdraw(1, caller=OWNER, now=T0 + DURATION + 1)
        with pytest.raises(PeriodEnded):
            custody.reset_period(caller=OWNER, now=T0 + DURATION + 1)

    def test_claim_at_deadline(self, custody):
        with pytest.raises(PeriodNotEnded):
            custody.claim_inheritance(NEXT_HEIR, caller=HEIR, now=T0 + DURATION)

    def test_claim_one_second_late(self, custody):
        custody.claim_inheritance(NEXT_HEIR, caller=HEIR, now=T0 + DURATION + 1)

    def test_deadline_monotonic(self, custody):
        history = [custody.period_end_at]
        now = T0
        for step in (1, DAY_SECONDS, DURATION):
            now += step
            custody.reset_period(caller=OWNER, now=now)
            history.append(custody.period_end_at)
        custody.claim_inheritance(NEXT_HEIR, caller=HEIR, now=now + DURATION + 1)
        history.append(custody.period_end_at)
        assert history == sorted(history)


class TestAtomicity:
    def test_failed_transfer_rolls_back(self):
        def refuse(to, amount):
            raise RuntimeError("receiver rejected payment")

        ledger = Ledger(on_transfer=refuse)
        custody = CustodyState(HEIR, 3, creator=OWNER, now=T0, ledger=ledger)
        before = _fields(custody)

        with pytest.raises(RuntimeError):
            custody.withdraw(2, caller=OWNER, now=T0 + 10)

        assert _fields(custody) == before
        assert ledger.balance_of(OWNER) == 0
        assert custody.events == []

    def test_failed_transfer_undoes_nested_withdraw(self):
        ledger = Ledger()
        custody = CustodyState(HEIR, 3, creator=OWNER, now=T0, ledger=ledger)
        calls = []

        def nested_then_refuse(to, amount):
            calls.append(amount)
            if len(calls) == 1:
                custody.withdraw(1, caller=OWNER, now=T0 + 1)
                raise RuntimeError("receiver rejected payment")

        ledger.on_transfer = nested_then_refuse
        before = _fields(custody)

        with pytest.raises(RuntimeError):
            custody.withdraw(2, caller=OWNER, now=T0 + 1)

        assert calls == [2, 1]
        assert _fields(custody) == before
        assert ledger.balance_of(OWNER) == 0
        assert custody.balance + ledger.balance_of(OWNER) == 3
        assert custody.events == []

    def test_reentrant_call_sees_new_deadline(self):
        seen = []
        ledger = Ledger()
        custody = CustodyState(HEIR, 3, creator=OWNER, now=T0, ledger=ledger)
        late = T0 + DURATION

        def on_transfer(to, amount):
            seen.append(custody.period_end_at)
            # Heir trying to claim from inside the payout must still be early.
            with pytest.raises(PeriodNotEnded):
                custody.claim_inheritance(STRANGER, caller=HEIR, now=late + 1)

        ledger.on_transfer = on_transfer
        custody.withdraw(1, caller=OWNER, now=late)

        assert seen == [late + DURATION]
        assert custody.owner == OWNER

    def test_errors_share_base_class(self):
        for exc in (NotOwner, NotHeir, NotEnoughBalance, PeriodEnded, PeriodNotEnded):
            assert issubclass(exc, CustodyError)


class TestReadHelpers:
    def test_status(self, custody):
        assert custody.status(T0) == STATUS_ALIVE
        assert custody.status(T0 + DURATION) == STATUS_ALIVE
        assert custody.status(T0 + DURATION + 1) == STATUS_CLAIMABLE

    def test_time_remaining(self, custody):
        assert custody.time_remaining(T0) == DURATION
        assert custody.time_remaining(T0 + DURATION) == 0
        assert custody.time_remaining(T0 + DURATION + 50) == 0
