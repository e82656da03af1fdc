"""
compile.py — Compile AlgoCustody contract to TEAL artifacts
============================================================
Usage:
    python scripts/compile.py

Outputs to contracts/artifacts/:
    AlgoCustody.approval.teal
    AlgoCustody.clear.teal
    AlgoCustody.abi.json
    application.json        (ARC-32 app spec, used by scripts/call.py)
"""

import sys, json, pathlib

sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))
from contracts.custody import app


def write_artifacts(out: pathlib.Path):
    out.mkdir(parents=True, exist_ok=True)
    spec = app.build()
    (out / "AlgoCustody.approval.teal").write_text(spec.approval_program)
    (out / "AlgoCustody.clear.teal").write_text(spec.clear_program)
    (out / "AlgoCustody.abi.json").write_text(json.dumps(spec.contract.dictify(), indent=2))
    (out / "application.json").write_text(spec.to_json())
    return spec


if __name__ == "__main__":
    out = pathlib.Path(__file__).parent.parent / "contracts" / "artifacts"
    spec = write_artifacts(out)

    print("✅ Artifacts written to contracts/artifacts/")
    print(f"   Approval TEAL : {len(spec.approval_program.splitlines())} lines")
    print(f"   Methods       : {[m.name for m in spec.contract.methods]}")
