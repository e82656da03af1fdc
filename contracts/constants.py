"""Constants shared by the on-chain application and the reference model."""

DAY_SECONDS = 24 * 60 * 60

# Fixed inactivity window; never configurable per instance.
DURATION = 30 * DAY_SECONDS

# ARC-28 event signatures
WITHDRAW_EVENT = "Withdraw(uint64,uint64)"
INHERITANCE_EVENT = "Inheritance(address,address)"

STATUS_ALIVE = "ALIVE"
STATUS_CLAIMABLE = "CLAIMABLE"
