"""
deploy.py — AlgoCustody contract deployment script
==================================================
Usage:
    python scripts/compile.py
    python scripts/deploy.py

Requirements:
    pip install -e .
    ALGO_MNEMONIC   deployer (becomes the owner)
    HEIR_ADDRESS    initial heir
    FUNDING_MICROALGOS  spendable pool to lock in the app (default 0)

The app address only exists once the app is created, so funding is a second
payment sent right after creation. The deployer also covers the account's
minimum balance so that get_balance() reports exactly FUNDING_MICROALGOS.
"""

import os, sys, json, base64, pathlib, math
from algosdk import encoding
from algosdk.abi import Contract
from algosdk.atomic_transaction_composer import (
    AccountTransactionSigner,
    AtomicTransactionComposer,
)
from algosdk.logic import get_application_address
from algosdk.transaction import (
    OnComplete, PaymentTxn, StateSchema, wait_for_confirmation
)

sys.path.insert(0, str(pathlib.Path(__file__).parent))
from algod_config import ARTIFACTS, NETWORK, get_algod, load_account, retry_on_429

MIN_ACCOUNT_BALANCE = 100_000  # microALGO

# State schema (exact count from contracts/custody.py):
#   Uint64 (1): period_end_at
#   Bytes  (2): owner, heir
GLOBAL_SCHEMA = StateSchema(num_uints=1, num_byte_slices=2)
LOCAL_SCHEMA  = StateSchema(num_uints=0, num_byte_slices=0)


def compile_program(algod, source: str) -> bytes:
    """Compile TEAL source and return raw bytes (rate-limit safe)."""
    response = retry_on_429(algod.compile, source)
    return base64.b64decode(response["result"])


def main():
    private_key, address = load_account()

    heir = os.getenv("HEIR_ADDRESS")
    if not heir or not encoding.is_valid_address(heir):
        sys.exit("❌  HEIR_ADDRESS must be set to a valid Algorand address.")
    funding = int(os.getenv("FUNDING_MICROALGOS", "0"))
    if funding < 0:
        sys.exit("❌  FUNDING_MICROALGOS must be non-negative.")

    try:
        approval_teal = (ARTIFACTS / "AlgoCustody.approval.teal").read_text()
        clear_teal    = (ARTIFACTS / "AlgoCustody.clear.teal").read_text()
        contract      = Contract.from_json((ARTIFACTS / "AlgoCustody.abi.json").read_text())
    except FileNotFoundError:
        sys.exit("❌  Artifacts missing. Run: python scripts/compile.py")

    algod = get_algod()

    print(f"\n🚀 Deploying AlgoCustody to {NETWORK.upper()}...")
    print(f"   Owner    : {address}")
    print(f"   Heir     : {heir}")

    try:
        info = retry_on_429(algod.account_info, address)
    except Exception as e:
        sys.exit(f"❌  Cannot reach Algorand node: {e}")
    balance = info.get("amount", 0)
    print(f"   Balance  : {balance / 1_000_000:.4f} ALGO")
    needed = funding + MIN_ACCOUNT_BALANCE + 200_000
    if balance < needed:
        sys.exit(
            f"\n❌  Insufficient balance. Need at least {needed / 1_000_000:.4f} ALGO.\n"
            f"   Fund this address: {address}\n"
        )

    print("   Compiling approval program...")
    approval_bytes = compile_program(algod, approval_teal)
    print("   Compiling clear program...")
    clear_bytes    = compile_program(algod, clear_teal)

    # Extra program pages: each page = 2048 bytes (max 3 extra pages)
    extra_pages = max(0, math.ceil(len(approval_bytes) / 2048) - 1)

    signer = AccountTransactionSigner(private_key)
    sp = retry_on_429(algod.suggested_params)

    atc = AtomicTransactionComposer()
    atc.add_method_call(
        app_id=0,
        method=contract.get_method_by_name("create"),
        sender=address,
        sp=sp,
        signer=signer,
        method_args=[heir],
        on_complete=OnComplete.NoOpOC,
        approval_program=approval_bytes,
        clear_program=clear_bytes,
        global_schema=GLOBAL_SCHEMA,
        local_schema=LOCAL_SCHEMA,
        extra_pages=extra_pages,
    )
    result = atc.execute(algod, 8)
    txid = result.tx_ids[0]
    app_id = retry_on_429(algod.pending_transaction_info, txid)["application-index"]
    app_addr = get_application_address(app_id)
    print(f"   Create tx : {txid}")

    print(f"   Funding app with {funding / 1_000_000:.4f} ALGO (+ min balance)...")
    fund_txn = PaymentTxn(
        sender=address,
        sp=retry_on_429(algod.suggested_params),
        receiver=app_addr,
        amt=funding + MIN_ACCOUNT_BALANCE,
    )
    fund_txid = retry_on_429(algod.send_transaction, fund_txn.sign(private_key))
    wait_for_confirmation(algod, fund_txid, wait_rounds=8)

    print("\n" + "═" * 60)
    print("  ✅ Contract deployed!")
    print(f"  📌 App ID       : {app_id}")
    print(f"  📦 App Address  : {app_addr}")
    print(f"  🔗 Tx ID        : {txid}")
    print("═" * 60)

    ARTIFACTS.mkdir(exist_ok=True)
    (ARTIFACTS / "deployed.json").write_text(json.dumps({
        "network": NETWORK,
        "app_id": app_id,
        "app_address": app_addr,
        "deploy_txid": txid,
        "fund_txid": fund_txid,
        "owner": address,
        "heir": heir,
    }, indent=2))
    print("  Saved to contracts/artifacts/deployed.json")

    return app_id, app_addr


if __name__ == "__main__":
    main()
