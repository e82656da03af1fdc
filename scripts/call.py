"""
call.py — Operate a deployed AlgoCustody app as the ALGO_MNEMONIC account
==========================================================================
Usage:
    python scripts/call.py status
    python scripts/call.py withdraw 250000
    python scripts/call.py reset-period
    python scripts/call.py claim <NEW_HEIR_ADDRESS>

The app id comes from APP_ID, or from contracts/artifacts/deployed.json.
"""

import os, sys, json, pathlib
from datetime import datetime, timezone

import typer
from algokit_utils import ApplicationClient, ApplicationSpecification, LogicError
from algosdk import encoding
from algosdk.atomic_transaction_composer import AccountTransactionSigner

sys.path.insert(0, str(pathlib.Path(__file__).parent))
from algod_config import ARTIFACTS, get_algod, load_account, retry_on_429

cli = typer.Typer(help="AlgoCustody operator commands")


def _app_id() -> int:
    if os.getenv("APP_ID"):
        return int(os.environ["APP_ID"])
    try:
        return json.loads((ARTIFACTS / "deployed.json").read_text())["app_id"]
    except FileNotFoundError:
        typer.echo("❌  APP_ID not set and contracts/artifacts/deployed.json missing.")
        raise typer.Exit(code=1)


def _client():
    try:
        spec = ApplicationSpecification.from_json((ARTIFACTS / "application.json").read_text())
    except FileNotFoundError:
        typer.echo("❌  Artifacts missing. Run: python scripts/compile.py")
        raise typer.Exit(code=1)
    private_key, address = load_account()
    algod = get_algod()
    client = ApplicationClient(
        algod,
        spec,
        app_id=_app_id(),
        signer=AccountTransactionSigner(private_key),
        sender=address,
    )
    return algod, client


def _call(client, method: str, **kwargs):
    try:
        return client.call(method, **kwargs).return_value
    except LogicError as exc:
        typer.echo(f"❌  {method} rejected: {exc}")
        raise typer.Exit(code=1) from exc


def _fmt_time(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


@cli.command()
def status() -> None:
    """Print owner, heir, deadline and balance."""
    _, client = _client()
    typer.echo(f"App ID         : {client.app_id}")
    typer.echo(f"Owner          : {_call(client, 'get_owner')}")
    typer.echo(f"Heir           : {_call(client, 'get_heir')}")
    typer.echo(f"Status         : {_call(client, 'get_status')}")
    typer.echo(f"Period ends at : {_fmt_time(_call(client, 'get_period_end_at'))}")
    typer.echo(f"Time remaining : {_call(client, 'get_time_remaining')}s")
    typer.echo(f"Balance        : {_call(client, 'get_balance') / 1_000_000:.6f} ALGO")


@cli.command()
def withdraw(amount: int = typer.Argument(..., min=0, help="microALGO to withdraw")) -> None:
    """Owner withdraws AMOUNT and extends the deadline."""
    algod, client = _client()
    # Outer txn pays the inner payment's fee.
    sp = retry_on_429(algod.suggested_params)
    sp.flat_fee = True
    sp.fee = 2 * sp.min_fee
    period_end_at = _call(client, "withdraw", transaction_parameters={"suggested_params": sp}, amount=amount)
    typer.echo(f"✅ Withdrew {amount} microALGO. Period now ends at {_fmt_time(period_end_at)}")


@cli.command("reset-period")
def reset_period() -> None:
    """Owner proves activity without moving funds."""
    _, client = _client()
    period_end_at = _call(client, "reset_period")
    typer.echo(f"✅ Period reset. Now ends at {_fmt_time(period_end_at)}")


@cli.command()
def claim(new_heir: str) -> None:
    """Heir takes custody and names NEW_HEIR."""
    if not encoding.is_valid_address(new_heir):
        raise typer.BadParameter("new-heir must be a valid Algorand address")
    _, client = _client()
    _call(client, "claim_inheritance", new_heir=new_heir)
    typer.echo(f"✅ Custody claimed. Next heir: {new_heir}")


if __name__ == "__main__":
    cli()
