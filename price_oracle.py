"""
price_oracle.py — Spot USD price of a chain's native asset from CoinGecko

GET /api/v3/simple/price?ids=<asset>&vs_currencies=usd
    -> {"<asset>": {"usd": <number>}}

A demo API key (COINGECKO_API_KEY) is sent as x-cg-demo-api-key when set.
"""

import math
import os
from typing import Optional

import requests

COINGECKO_SIMPLE_PRICE_URL = os.getenv(
    "COINGECKO_PRICE_URL", "https://api.coingecko.com/api/v3/simple/price"
)
DEFAULT_PRICE_TIMEOUT = 10


class PriceOracleError(RuntimeError):
    pass


def fetch_spot_price_usd(
    asset_id: str,
    api_key: Optional[str] = None,
    timeout: int = DEFAULT_PRICE_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> float:
    if api_key is None:
        api_key = os.getenv("COINGECKO_API_KEY")
    params = {"ids": asset_id, "vs_currencies": "usd"}
    headers = {"x-cg-demo-api-key": api_key} if api_key else {}
    http = session or requests

    try:
        response = http.get(
            COINGECKO_SIMPLE_PRICE_URL, params=params, headers=headers, timeout=timeout
        )
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as exc:
        raise PriceOracleError(f"Price fetch for {asset_id!r} failed: {exc}") from exc
    except ValueError as exc:
        raise PriceOracleError(f"Price API returned invalid JSON for {asset_id!r}") from exc

    try:
        price = float(data[asset_id]["usd"])
    except (KeyError, TypeError, ValueError):
        raise PriceOracleError(
            f"Price API response has no USD quote for {asset_id!r}: {data!r}"
        ) from None

    if not math.isfinite(price) or price < 0:
        raise PriceOracleError(f"Price API returned an invalid price for {asset_id!r}: {price}")
    return price
