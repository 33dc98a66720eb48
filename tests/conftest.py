"""
Shared fixtures: a scripted in-memory chain client and minimal Pancake artifacts.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest
from web3 import Web3

from chain_profiles import BSC
from contract_artifacts import ContractArtifact
from operation_estimators import OperationContext

GWEI = 10 ** 9
OWNER = Web3.to_checksum_address("0xacd0bd350355336c5537de56250ef01ed61e73eb")

FACTORY_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "_feeToSetter", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "tokenA", "type": "address"},
            {"internalType": "address", "name": "tokenB", "type": "address"},
        ],
        "name": "createPair",
        "outputs": [{"internalType": "address", "name": "pair", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

ROUTER_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "_factory", "type": "address"},
            {"internalType": "address", "name": "_WETH", "type": "address"},
        ],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"internalType": "uint256", "name": "amountOutMin", "type": "uint256"},
            {"internalType": "address[]", "name": "path", "type": "address[]"},
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactTokensForTokens",
        "outputs": [{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

# gas per operation in the reference scenario (5 gwei, $600)
SCENARIO_GAS = {
    "deploy:PancakeFactory": 21_000,
    "createPair": 90_000,
    "deploy:PancakeRouter": 1_800_000,
    "swapExactTokensForTokens": 120_000,
}
SCENARIO_APPROVAL_GAS = 46_000


class FakeChainClient:
    """Records every call; returns scripted gas figures or raises scripted errors."""

    def __init__(
        self,
        gas: Optional[Dict[str, int]] = None,
        gas_price: int = 5 * GWEI,
        failures: Optional[Dict[str, BaseException]] = None,
        receipt: Optional[Dict[str, Any]] = None,
        address: str = OWNER,
    ) -> None:
        self.gas = dict(SCENARIO_GAS if gas is None else gas)
        self._gas_price = gas_price
        self.failures = dict(failures or {})
        self.receipt = receipt or {
            "status": 1,
            "blockNumber": 100,
            "gasUsed": SCENARIO_APPROVAL_GAS,
            "effectiveGasPrice": gas_price,
        }
        self.address = address
        self.calls: List[Tuple[str, Any]] = []

    def _lookup(self, key: str) -> int:
        if key in self.failures:
            raise self.failures[key]
        return self.gas[key]

    def gas_price(self) -> int:
        self.calls.append(("gas_price", None))
        if "gas_price" in self.failures:
            raise self.failures["gas_price"]
        return self._gas_price

    def estimate_deployment_gas(self, artifact, constructor_args):
        key = f"deploy:{artifact.name}"
        self.calls.append((key, list(constructor_args)))
        return self._lookup(key)

    def estimate_contract_gas(self, address, abi, function_name, args):
        self.calls.append((function_name, {"address": address, "args": list(args)}))
        return self._lookup(function_name)

    def write_contract(self, address, abi, function_name, args):
        key = f"write:{function_name}"
        self.calls.append((key, {"address": address, "args": list(args)}))
        if key in self.failures:
            raise self.failures[key]
        return b"\x11" * 32

    def wait_for_receipt(self, tx_hash, confirmations=1):
        self.calls.append(("wait_for_receipt", confirmations))
        if "wait_for_receipt" in self.failures:
            raise self.failures["wait_for_receipt"]
        return self.receipt

    def effective_gas_price(self, receipt):
        return int(receipt["effectiveGasPrice"])

    def called(self, key: str) -> bool:
        return any(name == key for name, _ in self.calls)

    def args_of(self, key: str) -> Any:
        return next(payload for name, payload in self.calls if name == key)


@pytest.fixture
def factory_artifact():
    return ContractArtifact(name="PancakeFactory", abi=FACTORY_ABI, bytecode="0x6080604052")


@pytest.fixture
def router_artifact():
    return ContractArtifact(name="PancakeRouter", abi=ROUTER_ABI, bytecode="0x60c0604052")


@pytest.fixture
def fake_client():
    return FakeChainClient()


@pytest.fixture
def make_context(factory_artifact, router_artifact):
    def _make(client=None, profile=BSC, clock=lambda: 1_700_000_000.9):
        return OperationContext(
            client=client or FakeChainClient(),
            profile=profile,
            factory=factory_artifact,
            router=router_artifact,
            owner=OWNER,
            clock=clock,
        )

    return _make
