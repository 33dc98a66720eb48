#!/usr/bin/env python3
"""
swap_tco.py — Total cost of ownership (TCO) of a DEX factory/router + token swap

What it does:
- Fetches the network gas price and the native asset USD price in parallel
- Estimates, in order: factory deployment, createPair, router deployment,
  ERC-20 approval (REAL transaction, priced from its receipt), token swap
- Prints each operation's gas, gas price, native-token and USD cost
- Prints the TCO aggregate only when all five operations succeeded

Usage:
  PRIVATE_KEY=0x... python swap_tco.py --chain bsc
  python swap_tco.py --chain ethereum --confirm-timeout 900 --json
  python swap_tco.py --chain base --artifacts ./contracts/exchange-protocol/artifacts/contracts
  python swap_tco.py --list-chains
"""

import argparse
import json
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from web3 import Web3
from web3.exceptions import Web3Exception

from chain_client import (
    DEFAULT_CONFIRM_TIMEOUT,
    DEFAULT_RPC_TIMEOUT,
    ChainClient,
    ChainClientError,
    connect,
    load_account,
)
from chain_profiles import FACTORY_ARTIFACT, PROFILES, ROUTER_ARTIFACT, ChainProfile, get_profile
from contract_artifacts import ArtifactError, load_contract_artifact
from gas_cost_estimator import AggregateReport, CostEstimate, aggregate_costs, fmt_gwei
from operation_estimators import (
    EXECUTED_OPERATIONS,
    OPERATION_SEQUENCE,
    Estimator,
    OperationContext,
)
from price_oracle import PriceOracleError, fetch_spot_price_usd

__version__ = "0.1.0"

DEFAULT_CHAIN = os.getenv("TCO_CHAIN", "bsc")
DEFAULT_RPC_OVERRIDE = os.getenv("RPC_URL")
DEFAULT_ARTIFACTS = os.getenv("ARTIFACTS_PATH")
DEFAULT_OWNER = os.getenv("OWNER_ADDRESS")
DEFAULT_TIMEOUT = int(os.getenv("TCO_RPC_TIMEOUT", str(DEFAULT_RPC_TIMEOUT)))
DEFAULT_CONFIRM = float(os.getenv("TCO_CONFIRM_TIMEOUT", str(DEFAULT_CONFIRM_TIMEOUT)))

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_FAILED = 2

PriceFetcher = Callable[[str], float]


class MarketDataError(RuntimeError):
    pass


@dataclass(frozen=True)
class StageResult:
    operation: str
    estimate: Optional[CostEstimate] = None
    error: Optional[BaseException] = None
    executed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.estimate is not None


@dataclass
class TcoRun:
    profile: ChainProfile
    gas_price: int
    reference_price_usd: float
    stages: List[StageResult] = field(default_factory=list)
    aggregate: Optional[AggregateReport] = None

    @property
    def completed(self) -> bool:
        return self.aggregate is not None

    @property
    def failed_stage(self) -> Optional[StageResult]:
        return next((s for s in self.stages if not s.ok), None)


def fetch_market_inputs(
    client: ChainClient,
    asset_id: str,
    price_fetcher: PriceFetcher = fetch_spot_price_usd,
) -> Tuple[int, float]:
    """Read gas price and USD spot price concurrently; either failure fails both."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        gas_future = pool.submit(client.gas_price)
        price_future = pool.submit(price_fetcher, asset_id)
        try:
            return gas_future.result(), price_future.result()
        except (PriceOracleError, Web3Exception, OSError, ValueError) as exc:
            raise MarketDataError(f"Could not fetch gas price / USD price: {exc}") from exc


def run_cost_estimation(
    ctx: OperationContext,
    price_fetcher: PriceFetcher = fetch_spot_price_usd,
    on_stage: Optional[Callable[[StageResult], None]] = None,
    sequence: Tuple[Tuple[str, Estimator], ...] = OPERATION_SEQUENCE,
    on_market: Optional[Callable[[int, float], None]] = None,
) -> TcoRun:
    """
    Run the operation sequence and aggregate it.

    Market-input failures raise MarketDataError before any operation runs.
    An operation failure is recorded in its StageResult, reported through
    on_stage, and stops the sequence: later operations depend on on-chain
    state produced by earlier ones, and no aggregate is computed for an
    incomplete run.
    """
    gas_price, price = fetch_market_inputs(ctx.client, ctx.profile.price_asset_id, price_fetcher)
    if on_market is not None:
        on_market(gas_price, price)
    run = TcoRun(profile=ctx.profile, gas_price=gas_price, reference_price_usd=price)

    for name, estimator in sequence:
        executed = name in EXECUTED_OPERATIONS
        try:
            stage = StageResult(name, estimate=estimator(ctx, gas_price, price), executed=executed)
        except Exception as exc:
            stage = StageResult(name, error=exc, executed=executed)
        run.stages.append(stage)
        if on_stage is not None:
            on_stage(stage)
        if not stage.ok:
            return run

    run.aggregate = aggregate_costs(
        [s.estimate for s in run.stages], price, ctx.profile.native_decimals
    )
    return run


# ---------------------------------------------------------------- reporting

def format_stage(stage: StageResult, symbol: str) -> str:
    if not stage.ok:
        return f"❌ Error during {stage.operation}: {stage.error}"
    e = stage.estimate
    label = " (executed on-chain)" if stage.executed else ""
    return "\n".join(
        [
            f"\n=== {stage.operation}{label} ===",
            f"Gas used: {e.gas_used}",
            f"Gas price: {fmt_gwei(e.gas_price)} Gwei",
            f"Cost in {symbol}: {e.cost_in_native_token}",
            f"Cost in USD: ${e.cost_in_usd}",
        ]
    )


def format_summary(run: TcoRun) -> str:
    if run.aggregate is None:
        return ""
    symbol = run.profile.native_symbol
    agg = run.aggregate
    lines = [
        "\n=== TOTAL COST OVERVIEW (TCO) ===",
        f"Total gas used: {agg.total_gas_used}",
        f"Total cost in {symbol}: {agg.total_cost_in_native_token}",
        f"Total cost in USD: ${agg.total_cost_in_usd}",
        "\n=== COST BREAKDOWN ===",
    ]
    for s in run.stages:
        lines.append(
            f"{s.operation}: {s.estimate.cost_in_native_token} {symbol} (${s.estimate.cost_in_usd})"
        )
    return "\n".join(lines)


def run_to_dict(run: TcoRun) -> Dict[str, Any]:
    operations = []
    for s in run.stages:
        row: Dict[str, Any] = {"operation": s.operation, "executed": s.executed, "ok": s.ok}
        if s.ok:
            row.update(asdict(s.estimate))
        else:
            row["error"] = str(s.error) or type(s.error).__name__
        operations.append(row)
    failed = run.failed_stage
    return {
        "chain": run.profile.key,
        "network": run.profile.name,
        "chainId": run.profile.chain_id,
        "nativeSymbol": run.profile.native_symbol,
        "gasPriceWei": run.gas_price,
        "gasPriceGwei": fmt_gwei(run.gas_price),
        "referencePriceUsd": run.reference_price_usd,
        "operations": operations,
        "total": asdict(run.aggregate) if run.aggregate else None,
        "failedOperation": failed.operation if failed else None,
    }


def format_chain_table() -> str:
    headers = ["Key", "Network", "Chain", "Native", "Confirmations", "RPC"]
    rows = [
        [p.key, p.name, str(p.chain_id), p.native_symbol, str(p.confirmations), p.rpc_url]
        for p in PROFILES.values()
    ]
    all_rows = [headers] + rows
    widths = [max(len(r[i]) for r in all_rows) for i in range(len(headers))]

    def fmt_row(cols: List[str]) -> str:
        return "  ".join(c.ljust(widths[i]) for i, c in enumerate(cols))

    lines = [fmt_row(headers), fmt_row(["-" * w for w in widths])]
    lines.extend(fmt_row(r) for r in rows)
    return "\n".join(lines)


# ---------------------------------------------------------------- CLI

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Estimate gas and USD cost of deploying a DEX factory/router and swapping tokens.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--chain", default=DEFAULT_CHAIN, help="Chain profile key (see --list-chains)")
    p.add_argument("--rpc", default=DEFAULT_RPC_OVERRIDE, help="RPC URL override (default: profile RPC, or $RPC_URL)")
    p.add_argument("--artifacts", default=DEFAULT_ARTIFACTS, help="Directory with PancakeFactory.sol/ and PancakeRouter.sol/ artifacts")
    p.add_argument("--owner", default=DEFAULT_OWNER, help="Factory owner and swap recipient (default: signing account)")
    p.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="HTTP RPC timeout in seconds")
    p.add_argument("--confirm-timeout", type=float, default=DEFAULT_CONFIRM, help="Max seconds to wait for the approval to confirm")
    p.add_argument("--json", action="store_true", help="Output JSON instead of human-readable text")
    p.add_argument("--list-chains", action="store_true", help="List built-in chain profiles and exit")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def build_context(args: argparse.Namespace, profile: ChainProfile) -> OperationContext:
    account = load_account(os.getenv("PRIVATE_KEY"))
    artifacts_dir = Path(args.artifacts or profile.artifacts_dir)
    factory = load_contract_artifact(artifacts_dir / FACTORY_ARTIFACT)
    router = load_contract_artifact(artifacts_dir / ROUTER_ARTIFACT)

    rpc = args.rpc or profile.rpc_url
    w3 = connect(rpc, timeout=args.timeout, poa=profile.poa)
    print(f"🔗 RPC: {rpc}", file=sys.stderr)

    client = ChainClient(w3, account, confirm_timeout=args.confirm_timeout)
    owner = Web3.to_checksum_address(args.owner) if args.owner else account.address
    return OperationContext(client=client, profile=profile, factory=factory, router=router, owner=owner)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    if args.list_chains:
        print(format_chain_table())
        return EXIT_OK

    try:
        profile = get_profile(args.chain)
    except KeyError as exc:
        print(f"❌ {exc.args[0]}", file=sys.stderr)
        return EXIT_CONFIG

    print(
        f"🔍 Starting costs estimation for swap contracts on {profile.name} "
        f"at {time.strftime('%Y-%m-%d %H:%M:%S', time.gmtime())} UTC",
        file=sys.stderr,
    )

    try:
        ctx = build_context(args, profile)
    except (ChainClientError, ArtifactError, ValueError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return EXIT_CONFIG

    def report_stage(stage: StageResult) -> None:
        if not stage.ok:
            print(format_stage(stage, profile.native_symbol), file=sys.stderr)
        elif not args.json:
            print(format_stage(stage, profile.native_symbol))

    def report_market(gas_price: int, price: float) -> None:
        print(f"⛽ Current gas price: {fmt_gwei(gas_price)} Gwei", file=sys.stderr)
        print(f"💵 {profile.native_symbol} price (USD): {price:.3f}", file=sys.stderr)

    try:
        run = run_cost_estimation(
            ctx, price_fetcher=fetch_spot_price_usd, on_stage=report_stage, on_market=report_market
        )
    except MarketDataError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return EXIT_FAILED

    if args.json:
        print(json.dumps(run_to_dict(run), indent=2, sort_keys=True))
    elif run.completed:
        print(format_summary(run))

    if not run.completed:
        print("⚠️  Sequence incomplete; no TCO aggregate produced.", file=sys.stderr)
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        sys.exit(1)
