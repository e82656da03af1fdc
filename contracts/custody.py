"""
AlgoCustody — Timed Custodial Handover Smart Contract
======================================================
Built with Beaker 1.x + PyTEAL for Algorand

Architecture:
  - Creator becomes the owner and names an heir
  - Owner withdraws or resets the period to prove activity (30-day window)
  - Once the window lapses, the heir claims custody and names the next heir
  - Every successful call pushes the deadline to now + 30 days

Security:
  - Only owner can withdraw / reset, and only before the deadline
  - Only heir can claim, and only strictly after the deadline
  - Deadline is written before the inner payment is issued
  - Withdrawals capped at the account balance above its minimum balance
"""

from beaker import Application, GlobalStateValue
from pyteal import (
    Assert,
    Balance,
    Bytes,
    Concat,
    Expr,
    Global,
    If,
    InnerTxnBuilder,
    Int,
    Itob,
    Log,
    MethodSignature,
    MinBalance,
    Seq,
    Subroutine,
    TealType,
    Txn,
    TxnField,
    TxnType,
    abi,
)

from contracts.constants import (
    DURATION,
    INHERITANCE_EVENT,
    STATUS_ALIVE,
    STATUS_CLAIMABLE,
    WITHDRAW_EVENT,
)
from contracts.errors import (
    ERR_NOT_ENOUGH_BALANCE,
    ERR_NOT_HEIR,
    ERR_NOT_OWNER,
    ERR_PERIOD_ENDED,
    ERR_PERIOD_NOT_ENDED,
)


# ─────────────────────────────────────────────────────────────────────────────
# Global state  (1 uint64 + 2 byte slices)
# ─────────────────────────────────────────────────────────────────────────────
class CustodyState:
    owner = GlobalStateValue(
        TealType.bytes, key="owner", default=Bytes(""), descr="Current custodian"
    )
    heir = GlobalStateValue(
        TealType.bytes, key="heir", default=Bytes(""), descr="Designated successor"
    )
    period_end_at = GlobalStateValue(
        TealType.uint64, key="period_end_at", default=Int(0), descr="Deadline (unix seconds)"
    )


app = Application(
    "AlgoCustody",
    descr="Owner proves activity every 30 days or the heir takes over custody",
    state=CustodyState(),
)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
def next_period_end() -> Expr:
    return Global.latest_timestamp() + Int(DURATION)


def only_owner() -> Expr:
    return Assert(Txn.sender() == app.state.owner.get(), comment=ERR_NOT_OWNER)


def only_heir() -> Expr:
    return Assert(Txn.sender() == app.state.heir.get(), comment=ERR_NOT_HEIR)


def period_not_ended() -> Expr:
    return Assert(
        Global.latest_timestamp() <= app.state.period_end_at.get(), comment=ERR_PERIOD_ENDED
    )


def period_ended() -> Expr:
    return Assert(
        Global.latest_timestamp() > app.state.period_end_at.get(), comment=ERR_PERIOD_NOT_ENDED
    )


@Subroutine(TealType.uint64)
def spendable_balance() -> Expr:
    """Application balance above its minimum balance requirement."""
    account = Global.current_application_address()
    return If(
        Balance(account) > MinBalance(account),
        Balance(account) - MinBalance(account),
        Int(0),
    )


def emit_withdraw(amount: Expr, period_end_at: Expr) -> Expr:
    return Log(Concat(MethodSignature(WITHDRAW_EVENT), Itob(amount), Itob(period_end_at)))


def emit_inheritance(owner: Expr, heir: Expr) -> Expr:
    return Log(Concat(MethodSignature(INHERITANCE_EVENT), owner, heir))


# ─────────────────────────────────────────────────────────────────────────────
# 1. CREATE
# ─────────────────────────────────────────────────────────────────────────────
@app.create
def create(heir: abi.Address) -> Expr:
    """Caller becomes the owner. Fund the application address afterwards."""
    return Seq(
        app.state.owner.set(Txn.sender()),
        app.state.heir.set(heir.get()),
        app.state.period_end_at.set(next_period_end()),
    )


# ─────────────────────────────────────────────────────────────────────────────
# 2. WITHDRAW
# ─────────────────────────────────────────────────────────────────────────────
@app.external
def withdraw(amount: abi.Uint64, *, output: abi.Uint64) -> Expr:
    """Owner pays out `amount` microALGO to themselves and extends the deadline.

    Inner payment fee is 0: the caller must cover it through fee pooling.
    """
    return Seq(
        only_owner(),
        period_not_ended(),
        Assert(amount.get() <= spendable_balance(), comment=ERR_NOT_ENOUGH_BALANCE),
        # Deadline first, payment second.
        app.state.period_end_at.set(next_period_end()),
        InnerTxnBuilder.Execute({
            TxnField.type_enum: TxnType.Payment,
            TxnField.receiver:  app.state.owner.get(),
            TxnField.amount:    amount.get(),
            TxnField.fee:       Int(0),
        }),
        emit_withdraw(amount.get(), app.state.period_end_at.get()),
        output.set(app.state.period_end_at.get()),
    )


# ─────────────────────────────────────────────────────────────────────────────
# 3. RESET PERIOD (Proof of Life)
# ─────────────────────────────────────────────────────────────────────────────
@app.external
def reset_period(*, output: abi.Uint64) -> Expr:
    """Owner extends the deadline without moving funds."""
    return Seq(
        only_owner(),
        period_not_ended(),
        app.state.period_end_at.set(next_period_end()),
        emit_withdraw(Int(0), app.state.period_end_at.get()),
        output.set(app.state.period_end_at.get()),
    )


# ─────────────────────────────────────────────────────────────────────────────
# 4. CLAIM INHERITANCE
# ─────────────────────────────────────────────────────────────────────────────
@app.external
def claim_inheritance(new_heir: abi.Address) -> Expr:
    """Heir becomes owner and names the next heir. `new_heir` is not validated."""
    return Seq(
        only_heir(),
        period_ended(),
        app.state.owner.set(app.state.heir.get()),
        app.state.heir.set(new_heir.get()),
        app.state.period_end_at.set(next_period_end()),
        emit_inheritance(app.state.owner.get(), app.state.heir.get()),
    )


# ─────────────────────────────────────────────────────────────────────────────
# 5. READ-ONLY HELPERS
# ─────────────────────────────────────────────────────────────────────────────
@app.external(read_only=True)
def get_owner(*, output: abi.Address) -> Expr:
    return output.set(app.state.owner.get())


@app.external(read_only=True)
def get_heir(*, output: abi.Address) -> Expr:
    return output.set(app.state.heir.get())


@app.external(read_only=True)
def get_period_end_at(*, output: abi.Uint64) -> Expr:
    return output.set(app.state.period_end_at.get())


@app.external(read_only=True)
def get_duration(*, output: abi.Uint64) -> Expr:
    return output.set(Int(DURATION))


@app.external(read_only=True)
def get_balance(*, output: abi.Uint64) -> Expr:
    """Spendable microALGO held by the application."""
    return output.set(spendable_balance())


@app.external(read_only=True)
def get_status(*, output: abi.String) -> Expr:
    """Returns: ALIVE | CLAIMABLE"""
    return If(
        Global.latest_timestamp() <= app.state.period_end_at.get(),
        output.set(Bytes(STATUS_ALIVE)),
        output.set(Bytes(STATUS_CLAIMABLE)),
    )


@app.external(read_only=True)
def get_time_remaining(*, output: abi.Uint64) -> Expr:
    """Seconds until the deadline. Returns 0 once it is reached."""
    deadline = app.state.period_end_at.get()
    now      = Global.latest_timestamp()
    return If(
        now >= deadline,
        output.set(Int(0)),
        output.set(deadline - now),
    )
