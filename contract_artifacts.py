"""
contract_artifacts.py — Load compiled contract artifacts for deployment estimates

Hardhat writes one JSON file per contract with (at least) "abi" and
"bytecode"; web3 builds the deployment payload from those two.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

# Minimal ERC-20 ABI, approve only
ERC20_ABI: List[Dict[str, Any]] = [
    {
        "constant": False,
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    }
]


class ArtifactError(RuntimeError):
    pass


@dataclass(frozen=True)
class ContractArtifact:
    name: str
    abi: List[Dict[str, Any]]
    bytecode: str


def load_contract_artifact(path: Union[str, Path]) -> ContractArtifact:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArtifactError(f"Cannot read contract artifact {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ArtifactError(f"Artifact {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ArtifactError(f"Artifact {path} must be a JSON object")
    abi = data.get("abi")
    bytecode = data.get("bytecode")
    if not isinstance(abi, list):
        raise ArtifactError(f"Artifact {path} has no 'abi' list")
    if not isinstance(bytecode, str) or bytecode in ("", "0x"):
        raise ArtifactError(f"Artifact {path} has no 'bytecode'")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    name = data.get("contractName") or path.stem
    return ContractArtifact(name=name, abi=abi, bytecode=bytecode)

