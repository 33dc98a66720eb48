import pytest
from web3 import Web3

from chain_profiles import (
    ARBITRUM,
    BASE,
    BSC,
    ETHEREUM,
    NESTED_ARTIFACTS_DIR,
    PROFILES,
    ChainProfile,
    get_profile,
)


@pytest.mark.parametrize("profile", list(PROFILES.values()), ids=list(PROFILES))
def test_addresses_are_checksummed(profile):
    for address in (
        profile.factory_address,
        profile.router_address,
        profile.wrapped_native_address,
        *profile.pair_tokens,
        *profile.swap_path,
    ):
        assert Web3.is_checksum_address(address)


@pytest.mark.parametrize("profile", list(PROFILES.values()), ids=list(PROFILES))
def test_native_decimals_and_price_asset(profile):
    assert profile.native_decimals == 18
    assert profile.price_asset_id in ("ethereum", "binancecoin")


def test_known_chains():
    assert set(PROFILES) == {"bsc", "arbitrum", "base", "ethereum"}
    assert BSC.chain_id == 56
    assert ARBITRUM.chain_id == 42161
    assert BASE.chain_id == 8453
    assert ETHEREUM.chain_id == 1


def test_ethereum_waits_for_three_confirmations():
    assert ETHEREUM.confirmations == 3
    assert BSC.confirmations == ARBITRUM.confirmations == BASE.confirmations == 1


def test_bsc_prices_in_bnb():
    assert BSC.native_symbol == "BNB"
    assert BSC.price_asset_id == "binancecoin"
    assert BSC.poa is True


def test_amounts_are_scaled_by_token_decimals():
    # USDC on Base has 6 decimals, WETH 18
    assert BASE.amount_in_units == 100_000
    assert BASE.amount_out_min_units == 25_000_000_000_000
    # LINK (18) -> USDC (6) on mainnet
    assert ETHEREUM.amount_in_units == 10 ** 17
    assert ETHEREUM.amount_out_min_units == 1_300_000


def test_swap_token_in_is_first_hop():
    assert ARBITRUM.swap_token_in == ARBITRUM.swap_path[0]


def test_artifact_layout_differs_per_chain():
    assert BASE.artifacts_dir == NESTED_ARTIFACTS_DIR
    assert ARBITRUM.artifacts_dir == NESTED_ARTIFACTS_DIR
    assert BSC.artifacts_dir != NESTED_ARTIFACTS_DIR


def test_lowercase_addresses_are_normalised():
    profile = ChainProfile(
        key="local",
        name="Local",
        chain_id=31337,
        rpc_url="http://127.0.0.1:8545",
        factory_address=BSC.factory_address.lower(),
        router_address=BSC.router_address.lower(),
        wrapped_native_address=BSC.wrapped_native_address.lower(),
        native_symbol="ETH",
        price_asset_id="ethereum",
        pair_tokens=(BSC.pair_tokens[0].lower(), BSC.pair_tokens[1].lower()),
        swap_path=(BSC.swap_path[0].lower(), BSC.swap_path[1].lower()),
        amount_in="1",
        amount_in_decimals=18,
        amount_out_min="0",
        amount_out_decimals=18,
    )
    assert profile.factory_address == BSC.factory_address
    assert profile.swap_path == BSC.swap_path


def test_confirmations_must_be_positive():
    with pytest.raises(ValueError, match="confirmations"):
        ChainProfile(
            key="bad",
            name="Bad",
            chain_id=1,
            rpc_url="http://localhost",
            factory_address=BSC.factory_address,
            router_address=BSC.router_address,
            wrapped_native_address=BSC.wrapped_native_address,
            native_symbol="ETH",
            price_asset_id="ethereum",
            pair_tokens=BSC.pair_tokens,
            swap_path=BSC.swap_path,
            amount_in="1",
            amount_in_decimals=18,
            amount_out_min="0",
            amount_out_decimals=18,
            confirmations=0,
        )


def test_get_profile_is_case_insensitive():
    assert get_profile("BSC") is BSC


def test_get_profile_unknown_lists_known_keys():
    with pytest.raises(KeyError, match="arbitrum"):
        get_profile("solana")
