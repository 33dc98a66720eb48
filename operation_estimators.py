"""
operation_estimators.py — The five priced operations of a DEX swap setup

Order matters and is fixed by OPERATION_SEQUENCE:
  1. Factory Deployment   estimate (contract creation)
  2. Create Pair          estimate (pair must not exist yet)
  3. Router Deployment    estimate (contract creation)
  4. Token Approval       EXECUTED on-chain, priced from the receipt
  5. Token Swap           estimate (needs the allowance from step 4)
"""

import time
from dataclasses import dataclass
from typing import Callable, Tuple

from chain_client import ChainClient
from chain_profiles import ChainProfile
from contract_artifacts import ERC20_ABI, ContractArtifact
from gas_cost_estimator import CostEstimate, calculate_operation_cost

SWAP_DEADLINE_SECONDS = 600

FACTORY_DEPLOYMENT = "Factory Deployment"
CREATE_PAIR = "Create Pair"
ROUTER_DEPLOYMENT = "Router Deployment"
TOKEN_APPROVAL = "Token Approval"
TOKEN_SWAP = "Token Swap"


@dataclass(frozen=True)
class OperationContext:
    client: ChainClient
    profile: ChainProfile
    factory: ContractArtifact
    router: ContractArtifact
    # factory owner and swap recipient
    owner: str
    clock: Callable[[], float] = time.time


def swap_deadline(clock: Callable[[], float] = time.time) -> int:
    return int(clock()) + SWAP_DEADLINE_SECONDS


def _price(ctx: OperationContext, gas_used: int, gas_price: int, reference_price_usd: float) -> CostEstimate:
    return calculate_operation_cost(
        gas_used, gas_price, reference_price_usd, ctx.profile.native_decimals
    )


def estimate_factory_deployment(
    ctx: OperationContext, gas_price: int, reference_price_usd: float
) -> CostEstimate:
    gas = ctx.client.estimate_deployment_gas(ctx.factory, [ctx.owner])
    return _price(ctx, gas, gas_price, reference_price_usd)


def estimate_create_pair(
    ctx: OperationContext, gas_price: int, reference_price_usd: float
) -> CostEstimate:
    token_a, token_b = ctx.profile.pair_tokens
    gas = ctx.client.estimate_contract_gas(
        ctx.profile.factory_address, ctx.factory.abi, "createPair", [token_a, token_b]
    )
    return _price(ctx, gas, gas_price, reference_price_usd)


def estimate_router_deployment(
    ctx: OperationContext, gas_price: int, reference_price_usd: float
) -> CostEstimate:
    gas = ctx.client.estimate_deployment_gas(
        ctx.router, [ctx.profile.factory_address, ctx.profile.wrapped_native_address]
    )
    return _price(ctx, gas, gas_price, reference_price_usd)


def perform_token_approval(
    ctx: OperationContext, gas_price: int, reference_price_usd: float
) -> CostEstimate:
    """
    Approve the router to spend amount_in of the swap input token.

    This is a real transaction: the swap estimate that follows only succeeds
    once the allowance exists on-chain. The cost is what the receipt reports
    (gasUsed * effectiveGasPrice), so `gas_price` is not used here.
    """
    p = ctx.profile
    tx_hash = ctx.client.write_contract(
        p.swap_token_in, ERC20_ABI, "approve", [p.router_address, p.amount_in_units]
    )
    receipt = ctx.client.wait_for_receipt(tx_hash, confirmations=p.confirmations)
    return _price(
        ctx,
        int(receipt["gasUsed"]),
        ctx.client.effective_gas_price(receipt),
        reference_price_usd,
    )


def estimate_token_swap(
    ctx: OperationContext, gas_price: int, reference_price_usd: float
) -> CostEstimate:
    p = ctx.profile
    args = [
        p.amount_in_units,
        p.amount_out_min_units,
        list(p.swap_path),
        ctx.owner,
        swap_deadline(ctx.clock),
    ]
    gas = ctx.client.estimate_contract_gas(
        p.router_address, ctx.router.abi, "swapExactTokensForTokens", args
    )
    return _price(ctx, gas, gas_price, reference_price_usd)


Estimator = Callable[[OperationContext, int, float], CostEstimate]

OPERATION_SEQUENCE: Tuple[Tuple[str, Estimator], ...] = (
    (FACTORY_DEPLOYMENT, estimate_factory_deployment),
    (CREATE_PAIR, estimate_create_pair),
    (ROUTER_DEPLOYMENT, estimate_router_deployment),
    (TOKEN_APPROVAL, perform_token_approval),
    (TOKEN_SWAP, estimate_token_swap),
)

EXECUTED_OPERATIONS = frozenset({TOKEN_APPROVAL})
