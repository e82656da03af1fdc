"""
algod_config.py — Network, account and rate-limit helpers shared by the scripts
================================================================================
Environment (or .env file):
    NETWORK        testnet | localnet      (default: testnet)
    ALGO_MNEMONIC  25-word mnemonic of the acting account
"""

import os, sys, time, pathlib
from dotenv import load_dotenv
from algosdk import mnemonic, account
from algosdk.v2client import algod as algod_client_module
from algosdk.error import AlgodHTTPError

load_dotenv()

ARTIFACTS = pathlib.Path(__file__).parent.parent / "contracts" / "artifacts"

# ── Rate-limit helpers ────────────────────────────────────────────────────────
# AlgoNode free tier: ~1 req/s on algod; add backoff on HTTP 429.
_CALL_DELAY = 0.5          # seconds between sequential API calls
_MAX_RETRIES = 5
_BACKOFF_BASE = 2          # exponential base (2 ** attempt seconds)


def retry_on_429(fn, *args, **kwargs):
    """Call fn(*args, **kwargs) retrying up to _MAX_RETRIES times on HTTP 429."""
    for attempt in range(_MAX_RETRIES):
        try:
            result = fn(*args, **kwargs)
            time.sleep(_CALL_DELAY)
            return result
        except AlgodHTTPError as exc:
            if "429" in str(exc) or getattr(exc, "code", None) == 429:
                wait = _BACKOFF_BASE ** attempt
                print(f"   ⏳ Rate limited – retrying in {wait}s (attempt {attempt+1}/{_MAX_RETRIES})...")
                time.sleep(wait)
            else:
                raise
    raise RuntimeError("algod rate limit: max retries exceeded")


# ── Config ────────────────────────────────────────────────────────────────────
NETWORK = os.getenv("NETWORK", "testnet")

ALGOD_SERVERS = {
    "testnet":  ("https://testnet-api.algonode.network", "", ""),
    "localnet": ("http://localhost", 4001, "a" * 64),
}


def get_algod():
    if NETWORK not in ALGOD_SERVERS:
        sys.exit(f"Unsupported network: {NETWORK}")
    server, port, token = ALGOD_SERVERS[NETWORK]
    url = server if not port else f"{server}:{port}"
    headers = {"User-Agent": "algosdk", "x-api-key": token} if token else {"User-Agent": "algosdk"}
    return algod_client_module.AlgodClient(token, url, headers=headers)


def load_account():
    """Return (private_key, address) for ALGO_MNEMONIC, exiting if it is unset."""
    raw_mnemonic = os.getenv("ALGO_MNEMONIC")
    if not raw_mnemonic:
        sys.exit(
            "❌  ALGO_MNEMONIC environment variable not set.\n"
            "    Export your 25-word mnemonic:\n"
            "    export ALGO_MNEMONIC='word1 word2 ... word25'"
        )
    private_key = mnemonic.to_private_key(raw_mnemonic)
    return private_key, account.address_from_private_key(private_key)
