"""
Custody error taxonomy
======================

Every precondition failure aborts the whole operation. The names below are
also the TEAL assertion comments of the on-chain application, so a rejected
transaction and a rejected model call report the same error name.
"""

ERR_NOT_OWNER = "NotOwner"
ERR_NOT_HEIR = "NotHeir"
ERR_NOT_ENOUGH_BALANCE = "NotEnoughBalance"
ERR_PERIOD_ENDED = "PeriodEnded"
ERR_PERIOD_NOT_ENDED = "PeriodNotEnded"


class CustodyError(Exception):
    """Base class for rejected custody operations."""

    name = "CustodyError"


class NotOwner(CustodyError):
    name = ERR_NOT_OWNER

    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"{self.name}: {caller!r} is not the owner")


class NotHeir(CustodyError):
    name = ERR_NOT_HEIR

    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"{self.name}: {caller!r} is not the heir")


class NotEnoughBalance(CustodyError):
    name = ERR_NOT_ENOUGH_BALANCE

    def __init__(self, balance: int, requested: int):
        self.balance = balance
        self.requested = requested
        super().__init__(f"{self.name}(balance={balance}, requested={requested})")


class PeriodEnded(CustodyError):
    """Owner operation attempted after the deadline."""

    name = ERR_PERIOD_ENDED

    def __init__(self, period_end_at: int, now: int):
        self.period_end_at = period_end_at
        self.now = now
        super().__init__(f"{self.name}(period_end_at={period_end_at}, now={now})")


class PeriodNotEnded(CustodyError):
    """Heir claim attempted while the deadline has not passed."""

    name = ERR_PERIOD_NOT_ENDED

    def __init__(self, period_end_at: int, now: int):
        self.period_end_at = period_end_at
        self.now = now
        super().__init__(f"{self.name}(period_end_at={period_end_at}, now={now})")
