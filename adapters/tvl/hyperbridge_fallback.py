"""
On-chain fallback: balances held by the Hyperbridge bridge contracts.

Used when the indexer is unreachable or its data is too thin to estimate from.
Only assembles the (token, owner) matrix; summation is the helper's job.
"""

from typing import List, Tuple

from config.hyperbridge import HYPERBRIDGE, HyperbridgeConfig


def bridge_tokens_and_owners(
    chain: str,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> List[Tuple[str, str]]:
    """Cartesian product of the chain's fallback tokens and the bridge contracts."""
    pairs = []
    for symbol in registry.fallback_tokens:
        asset = registry.core_asset(chain, symbol)
        if asset is None:
            continue
        for owner in registry.bridge_contracts:
            pairs.append((asset.address, owner))
    return pairs


def probe_bridge_balances(api, registry: HyperbridgeConfig = HYPERBRIDGE) -> int:
    """
    Hand the bridge balance matrix for api.chain to api.sum_tokens.

    Returns:
        Number of (token, owner) pairs submitted
    """
    print(f"[{api.chain}] Using contract-based fallback TVL calculation")
    pairs = bridge_tokens_and_owners(api.chain, registry)
    if not pairs:
        print(f"[{api.chain}] No supported tokens found for chain")
        return 0
    api.sum_tokens(pairs)
    return len(pairs)
