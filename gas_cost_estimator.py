"""
gas_cost_estimator.py — Turn gas figures into native-token and USD costs

What it does:
- Multiplies gasUsed by gasPrice with exact integer arithmetic
- Scales the wei product into a native-token decimal string with Web3.from_wei
- Converts that string to USD using a reference spot price (6 decimals)
- Sums several estimates into one TCO aggregate using the same conversion
"""

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Iterable, Optional

from web3 import Web3

NATIVE_DECIMALS = 18
USD_DIGITS = 6

# web3 denomination names by number of decimals
_UNIT_BY_DECIMALS = {
    0: "wei",
    3: "kwei",
    6: "mwei",
    9: "gwei",
    12: "szabo",
    15: "finney",
    18: "ether",
}


class CostCalculationError(ValueError):
    """Raised when a cost cannot be computed from the given inputs."""


@dataclass(frozen=True)
class CostEstimate:
    gas_used: int
    gas_price: int
    cost_in_base_units: int
    cost_in_native_token: str
    cost_in_usd: str


@dataclass(frozen=True)
class AggregateReport:
    total_gas_used: int
    total_cost_in_base_units: int
    total_cost_in_native_token: str
    total_cost_in_usd: str


def _unit_for(decimals: int) -> str:
    try:
        return _UNIT_BY_DECIMALS[decimals]
    except KeyError:
        raise CostCalculationError(
            f"no web3 denomination has {decimals} decimals "
            f"(supported: {sorted(_UNIT_BY_DECIMALS)})"
        ) from None


def _plain(amount) -> str:
    # web3 converts at 999 digits; normalize() would round at 28
    with localcontext() as ctx:
        ctx.prec = 999
        return format(Decimal(amount).normalize(), "f")


def format_units(value: int, decimals: int) -> str:
    """
    Render an integer amount of base units as a decimal string.

    format_units(1, 18)                 -> "0.000000000000000001"
    format_units(10385000000000000, 18) -> "0.010385"
    format_units(2 * 10**18, 18)        -> "2"
    """
    unit = _unit_for(decimals)
    if value < 0:
        raise CostCalculationError(f"amount must be non-negative, got {value}")
    return _plain(Web3.from_wei(int(value), unit))


def parse_units(value: str, decimals: int) -> int:
    """Inverse of format_units: "0.1" with 6 decimals -> 100000."""
    unit = _unit_for(decimals)
    try:
        base_units = Web3.to_wei(str(value), unit)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise CostCalculationError(f"not a valid amount: {value!r}") from exc
    # to_wei truncates digits below one base unit
    if Web3.from_wei(base_units, unit) != Decimal(str(value)):
        raise CostCalculationError(
            f"{value!r} has more than {decimals} fractional digits"
        )
    return base_units


def fmt_gwei(wei: int) -> str:
    return _plain(Web3.from_wei(int(wei), "gwei"))


def _check_reference_price(reference_price_usd: Optional[float]) -> float:
    if reference_price_usd is None:
        raise CostCalculationError("reference USD price is missing")
    try:
        price = float(reference_price_usd)
    except (TypeError, ValueError) as exc:
        raise CostCalculationError(
            f"reference USD price is not a number: {reference_price_usd!r}"
        ) from exc
    if not math.isfinite(price) or price < 0:
        raise CostCalculationError(f"reference USD price is invalid: {reference_price_usd!r}")
    return price


def _to_usd(native_amount: str, price: float) -> str:
    return f"{round(float(native_amount) * price, USD_DIGITS):.{USD_DIGITS}f}"


def calculate_operation_cost(
    gas_used: int,
    gas_price: int,
    reference_price_usd: float,
    native_decimals: int = NATIVE_DECIMALS,
) -> CostEstimate:
    if gas_used < 0:
        raise CostCalculationError(f"gas_used must be non-negative, got {gas_used}")
    if gas_price < 0:
        raise CostCalculationError(f"gas_price must be non-negative, got {gas_price}")
    price = _check_reference_price(reference_price_usd)

    cost_in_base_units = int(gas_used) * int(gas_price)
    cost_in_native_token = format_units(cost_in_base_units, native_decimals)

    return CostEstimate(
        gas_used=int(gas_used),
        gas_price=int(gas_price),
        cost_in_base_units=cost_in_base_units,
        cost_in_native_token=cost_in_native_token,
        cost_in_usd=_to_usd(cost_in_native_token, price),
    )


def aggregate_costs(
    estimates: Iterable[CostEstimate],
    reference_price_usd: float,
    native_decimals: int = NATIVE_DECIMALS,
) -> AggregateReport:
    """
    Sum gas and wei across estimates, then convert the wei total once.

    Per-operation USD strings are never added together, so the total does not
    accumulate rounding from the individual rows.
    """
    price = _check_reference_price(reference_price_usd)
    total_gas = 0
    total_wei = 0
    for estimate in estimates:
        total_gas += estimate.gas_used
        total_wei += estimate.cost_in_base_units

    total_native = format_units(total_wei, native_decimals)
    return AggregateReport(
        total_gas_used=total_gas,
        total_cost_in_base_units=total_wei,
        total_cost_in_native_token=total_native,
        total_cost_in_usd=_to_usd(total_native, price),
    )
