"""
chain_profiles.py — Per-network constants for the swap TCO run

Each ChainProfile carries everything that differs between networks: RPC,
DEX factory/router addresses, wrapped native token, the token pair used for
the createPair estimate, the swap path and amounts, confirmation depth and
the CoinGecko asset id of the native token.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from web3 import Web3

from gas_cost_estimator import NATIVE_DECIMALS, parse_units

FACTORY_ARTIFACT = "PancakeFactory.sol/PancakeFactory.json"
ROUTER_ARTIFACT = "PancakeRouter.sol/PancakeRouter.json"

HARDHAT_ARTIFACTS_DIR = "./artifacts/contracts/exchange-protocol/contracts"
NESTED_ARTIFACTS_DIR = "./contracts/exchange-protocol/artifacts/contracts"


@dataclass(frozen=True)
class ChainProfile:
    key: str
    name: str
    chain_id: int
    rpc_url: str
    factory_address: str
    router_address: str
    wrapped_native_address: str
    native_symbol: str
    price_asset_id: str
    # createPair is only estimable while this pair does not exist yet
    pair_tokens: Tuple[str, str]
    # swap needs an existing, funded pair and an approved allowance
    swap_path: Tuple[str, str]
    amount_in: str
    amount_in_decimals: int
    amount_out_min: str
    amount_out_decimals: int
    confirmations: int = 1
    native_decimals: int = NATIVE_DECIMALS
    artifacts_dir: str = HARDHAT_ARTIFACTS_DIR
    poa: bool = False

    def __post_init__(self) -> None:
        if self.confirmations < 1:
            raise ValueError(f"{self.key}: confirmations must be >= 1")
        # frozen dataclass: normalise through object.__setattr__
        for attr in ("factory_address", "router_address", "wrapped_native_address"):
            object.__setattr__(self, attr, Web3.to_checksum_address(getattr(self, attr)))
        object.__setattr__(
            self, "pair_tokens", tuple(Web3.to_checksum_address(a) for a in self.pair_tokens)
        )
        object.__setattr__(
            self, "swap_path", tuple(Web3.to_checksum_address(a) for a in self.swap_path)
        )

    @property
    def swap_token_in(self) -> str:
        return self.swap_path[0]

    @property
    def amount_in_units(self) -> int:
        return parse_units(self.amount_in, self.amount_in_decimals)

    @property
    def amount_out_min_units(self) -> int:
        return parse_units(self.amount_out_min, self.amount_out_decimals)


BSC = ChainProfile(
    key="bsc",
    name="BNB Smart Chain",
    chain_id=56,
    rpc_url="https://bsc-rpc.publicnode.com",
    factory_address="0xcA143Ce32Fe78f1f7019d7d551a6402fC5350c73",
    router_address="0x10ED43C718714eb63d5aA57B78B54704E256024E",
    wrapped_native_address="0x4DB5a66E937A9F4473fA95b1cAF1d1E1D62E29EA",
    native_symbol="BNB",
    price_asset_id="binancecoin",
    pair_tokens=(
        "0x9D173E6c594f479B4d47001F8E6A95A7aDDa42bC",
        "0xfb5B838b6cfEEdC2873aB27866079AC55363D37E",
    ),
    swap_path=(
        "0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d",  # USDC
        "0x0E09FaBB73Bd3Ade0a17ECC321fD13a19e81cE82",  # CAKE
    ),
    amount_in="0.1",
    amount_in_decimals=18,
    amount_out_min="0.02",
    amount_out_decimals=18,
    poa=True,
)

ARBITRUM = ChainProfile(
    key="arbitrum",
    name="Arbitrum One",
    chain_id=42161,
    rpc_url="https://arb1.arbitrum.io/rpc",
    factory_address="0x02a84c1b3BBD7401a5f7fa98a384EBC70bB5749E",
    router_address="0x8cFe327CEc66d1C090Dd72bd0FF11d690C33a2Eb",
    wrapped_native_address="0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
    native_symbol="ETH",
    price_asset_id="ethereum",
    pair_tokens=(
        "0xCBeb19549054CC0a6257A77736FC78C367216cE7",
        "0x25d887Ce7a35172C62FeBFD67a1856F20FaEbB00",
    ),
    swap_path=(
        "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",  # USDC
        "0x912CE59144191C1204E64559FE8253a0e49E6548",  # ARB
    ),
    amount_in="0.1",
    amount_in_decimals=6,
    amount_out_min="0.2",
    amount_out_decimals=18,
    artifacts_dir=NESTED_ARTIFACTS_DIR,
)

BASE = ChainProfile(
    key="base",
    name="Base",
    chain_id=8453,
    rpc_url="https://mainnet.base.org",
    factory_address="0x02a84c1b3BBD7401a5f7fa98a384EBC70bB5749E",
    router_address="0x8cFe327CEc66d1C090Dd72bd0FF11d690C33a2Eb",
    wrapped_native_address="0x4200000000000000000000000000000000000006",
    native_symbol="ETH",
    price_asset_id="ethereum",
    pair_tokens=(
        "0xA202B2b7B4D2fe56BF81492FFDDA657FE512De07",
        "0xc1512B7023A97d54f8Dd757B1F84e132297CA0D7",
    ),
    swap_path=(
        "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",  # USDC
        "0x4200000000000000000000000000000000000006",  # WETH
    ),
    amount_in="0.1",
    amount_in_decimals=6,
    amount_out_min="0.000025",
    amount_out_decimals=18,
    artifacts_dir=NESTED_ARTIFACTS_DIR,
)

ETHEREUM = ChainProfile(
    key="ethereum",
    name="Ethereum Mainnet",
    chain_id=1,
    rpc_url="https://ethereum-rpc.publicnode.com",
    factory_address="0x1097053Fd2ea711dad45caCcc45EfF7548fCB362",
    router_address="0xEfF92A263d31888d860bD50809A8D171709b7b1c",
    wrapped_native_address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    native_symbol="ETH",
    price_asset_id="ethereum",
    pair_tokens=(
        "0x8236a87084f8B84306f72007F36F2618A5634494",
        "0x4a220E6096B25EADb88358cb44068A3248254675",
    ),
    swap_path=(
        "0x514910771AF9Ca656af840dff83E8264EcF986CA",  # LINK
        "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",  # USDC
    ),
    amount_in="0.1",
    amount_in_decimals=18,
    amount_out_min="1.3",
    amount_out_decimals=6,
    confirmations=3,
)

PROFILES: Dict[str, ChainProfile] = {
    p.key: p for p in (BSC, ARBITRUM, BASE, ETHEREUM)
}


def get_profile(key: str) -> ChainProfile:
    try:
        return PROFILES[key.lower()]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        raise KeyError(f"Unknown chain {key!r} (known: {known})") from None
