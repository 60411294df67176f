"""
Turns a USD estimate into raw token balances for the aggregation helper.

Stablecoins are treated as $1. Where none of the configured stablecoins exist
on a chain, the whole estimate is expressed in the reference asset (WETH) at
the fixed price from config/hyperbridge.yaml.
"""

import math
from dataclasses import dataclass
from typing import List

from config.hyperbridge import HYPERBRIDGE, HyperbridgeConfig
from .hyperbridge_estimator import EstimatorConfig, STABLECOIN_SPLIT


@dataclass(frozen=True)
class Allocation:
    symbol: str
    token: str
    amount: int


def to_raw_units(usd_value: float, decimals: int, unit_price: float = 1.0) -> int:
    """floor(usd_value / unit_price * 10**decimals), never negative."""
    if not math.isfinite(usd_value) or usd_value <= 0 or unit_price <= 0:
        return 0
    raw = usd_value / unit_price * 10 ** decimals
    if not math.isfinite(raw):
        return 0
    return max(int(math.floor(raw)), 0)


def allocate(
    estimate: float,
    chain: str,
    config: EstimatorConfig = STABLECOIN_SPLIT,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> List[Allocation]:
    """
    Split `estimate` across the chain's stablecoins.

    Returns:
        Allocations with positive raw amounts; empty when the estimate is not
        positive or the chain has neither split tokens nor the reference asset
    """
    if estimate <= 0:
        return []

    allocations = []
    for symbol, pct in config.allocation_split:
        asset = registry.core_asset(chain, symbol)
        if asset is None:
            continue
        amount = to_raw_units(estimate * pct, asset.decimals)
        if amount > 0:
            allocations.append(Allocation(symbol, asset.address, amount))
        if config.first_match_only:
            break

    if allocations:
        return allocations

    ref = registry.core_asset(chain, config.reference_asset)
    price = registry.reference_prices.get(config.reference_asset)
    if ref is None or not price:
        print(f"[{chain}] ⚠️ no {config.reference_asset} address or price, nothing to allocate")
        return []

    print(f"[{chain}] No stablecoins registered, pricing estimate in "
          f"{config.reference_asset} at ${price:,.2f}")
    amount = to_raw_units(estimate, ref.decimals, unit_price=price)
    return [Allocation(config.reference_asset, ref.address, amount)] if amount > 0 else []


def report_allocations(
    api,
    estimate: float,
    config: EstimatorConfig = STABLECOIN_SPLIT,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> List[Allocation]:
    """Issue one api.add_token call per allocation and return what was reported."""
    allocations = allocate(estimate, api.chain, config, registry)
    if allocations:
        print(f"[{api.chain}] Adding ${estimate:,.2f} worth of tokens")
    for a in allocations:
        print(f"[{api.chain}] Adding {a.symbol}: {a.amount}")
        api.add_token(a.token, a.amount)
    return allocations
