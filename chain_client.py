"""
chain_client.py — Thin web3.py wrapper used by the operation estimators

Exposes the handful of RPC capabilities the TCO run needs:
  • gas_price()                      current network gas price (wei)
  • estimate_deployment_gas(...)     eth_estimateGas on a contract creation payload
  • estimate_contract_gas(...)       eth_estimateGas on a contract function call
  • write_contract(...)              sign + send a contract call, returns tx hash
  • wait_for_receipt(...)            bounded wait for N confirmations
"""

import time
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted
from web3.middleware import ExtraDataToPOAMiddleware

from contract_artifacts import ContractArtifact

DEFAULT_RPC_TIMEOUT = 30
DEFAULT_CONFIRM_TIMEOUT = 300
DEFAULT_POLL_LATENCY = 2.0


class ChainClientError(RuntimeError):
    pass


class ConfigurationError(ChainClientError):
    pass


class ConfirmationTimeoutError(ChainClientError):
    pass


class TransactionRevertedError(ChainClientError):
    pass


def load_account(private_key: Optional[str]) -> LocalAccount:
    if not private_key:
        raise ConfigurationError("PRIVATE_KEY is not set")
    try:
        return Account.from_key(private_key)
    except Exception as exc:
        raise ConfigurationError(f"PRIVATE_KEY is not a valid private key: {exc}") from None


def connect(rpc: str, timeout: int = DEFAULT_RPC_TIMEOUT, poa: bool = False) -> Web3:
    if not rpc.startswith("http"):
        raise ConfigurationError(f"Invalid RPC URL {rpc!r}: must start with http or https")
    w3 = Web3(Web3.HTTPProvider(rpc, request_kwargs={"timeout": timeout}))
    if not w3.is_connected():
        raise ConfigurationError(f"Failed to connect to RPC: {rpc}")
    # BSC and other PoA chains carry extra data in the block header
    if poa:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3


class ChainClient:
    def __init__(
        self,
        w3: Web3,
        account: LocalAccount,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        poll_latency: float = DEFAULT_POLL_LATENCY,
    ) -> None:
        self.w3 = w3
        self.account = account
        self.confirm_timeout = confirm_timeout
        self.poll_latency = poll_latency

    @property
    def address(self) -> str:
        return self.account.address

    def gas_price(self) -> int:
        return int(self.w3.eth.gas_price)

    def estimate_deployment_gas(
        self, artifact: ContractArtifact, constructor_args: Sequence[Any]
    ) -> int:
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        return int(factory.constructor(*constructor_args).estimate_gas({"from": self.address}))

    def _call(self, address: str, abi: List[Dict[str, Any]], function_name: str, args: Sequence[Any]):
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        return contract.get_function_by_name(function_name)(*args)

    def estimate_contract_gas(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any],
    ) -> int:
        call = self._call(address, abi, function_name, args)
        return int(call.estimate_gas({"from": self.address}))

    def write_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any],
    ) -> HexBytes:
        call = self._call(address, abi, function_name, args)
        tx = call.build_transaction(
            {
                "from": self.address,
                "nonce": self.w3.eth.get_transaction_count(self.address),
            }
        )
        signed = self.account.sign_transaction(tx)
        return self.w3.eth.send_raw_transaction(signed.raw_transaction)

    def wait_for_receipt(self, tx_hash: HexBytes, confirmations: int = 1) -> Dict[str, Any]:
        """
        Wait until tx_hash is mined and buried under `confirmations` blocks.

        One confirmation means "included in a block". The whole wait,
        inclusion plus the extra depth, is bounded by confirm_timeout.
        """
        started = time.monotonic()
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.confirm_timeout, poll_latency=self.poll_latency
            )
        except TimeExhausted as exc:
            raise ConfirmationTimeoutError(
                f"Transaction {Web3.to_hex(tx_hash)} not mined within {self.confirm_timeout}s"
            ) from exc

        if receipt.get("status") == 0:
            raise TransactionRevertedError(f"Transaction {Web3.to_hex(tx_hash)} reverted")

        mined_in = int(receipt["blockNumber"])
        while int(self.w3.eth.block_number) - mined_in + 1 < confirmations:
            if time.monotonic() - started >= self.confirm_timeout:
                raise ConfirmationTimeoutError(
                    f"Transaction {Web3.to_hex(tx_hash)} did not reach "
                    f"{confirmations} confirmations within {self.confirm_timeout}s"
                )
            time.sleep(self.poll_latency)
        return receipt

    def effective_gas_price(self, receipt: Dict[str, Any]) -> int:
        price = receipt.get("effectiveGasPrice")
        if price is None:
            # pre-London style receipts: fall back to the tx gasPrice
            price = self.w3.eth.get_transaction(receipt["transactionHash"])["gasPrice"]
        return int(price)
