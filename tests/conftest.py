import pytest
from algosdk.error import AlgodHTTPError
from algosdk.v2client import algod

ALGOD_TOKEN = "a" * 64
ALGOD_SERVER = "http://localhost"
ALGOD_PORT = 4001


@pytest.fixture(scope="module")
def algod_client():
    """LocalNet algod client; skips the requesting tests when LocalNet is down."""
    client = algod.AlgodClient(ALGOD_TOKEN, f"{ALGOD_SERVER}:{ALGOD_PORT}")
    try:
        client.status()
    except (AlgodHTTPError, OSError):
        pytest.skip(f"AlgoKit LocalNet not reachable at {ALGOD_SERVER}:{ALGOD_PORT}")
    return client
