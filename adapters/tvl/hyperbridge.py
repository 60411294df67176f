"""
Hyperbridge TVL Adapter

Architecture:
- Cross-chain bridge between Polkadot and EVM chains (TokenGateway)
- Most assets are burn-and-mint, so contract balances understate what was bridged
- Polytope's GraphQL indexer reports per-chain stats and every teleport

TVL Extraction:
1. Fetch chain stats + teleports from the indexer (one query, all chains)
2. Estimate the USD value attributable to the requested chain
3. Report the estimate as stablecoin balances via api.add_token()
4. If the indexer fails or the data is too thin, report the bridge
   contracts' on-chain balances via api.sum_tokens() instead

Results are communicated only through the api callbacks.
"""

from functools import partial
from typing import Any, Callable, Dict, Optional

from config.hyperbridge import HYPERBRIDGE, HyperbridgeConfig
from .hyperbridge_allocator import report_allocations
from .hyperbridge_estimator import STABLECOIN_SPLIT, Estimate, EstimatorConfig, estimate_chain_value
from .hyperbridge_fallback import probe_bridge_balances
from .hyperbridge_indexer import FetchResult, IndexerSnapshot, TransportError, fetch_indexer_snapshot


def calculate_chain_tvl(
    api,
    config: EstimatorConfig = STABLECOIN_SPLIT,
    fetch: Callable[[], FetchResult] = fetch_indexer_snapshot,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> Optional[Estimate]:
    """
    Run fetch -> estimate -> allocate for api.chain.

    Returns:
        The Estimate that was reported, or None when the fallback prober ran
    """
    print(f"[{api.chain}] Starting TVL calculation ({config.name})...")

    try:
        result = fetch()
    except Exception as e:
        print(f"[{api.chain}] ⚠️ indexer fetch failed: {e}")
        result = TransportError(str(e))
    if not isinstance(result, IndexerSnapshot):
        print(f"[{api.chain}] No indexer data ({result.reason}), using contract fallback")
        probe_bridge_balances(api, registry)
        return None

    try:
        estimate = estimate_chain_value(result, api.chain, config, registry)
    except Exception as e:
        print(f"[{api.chain}] ⚠️ estimation failed: {e}")
        probe_bridge_balances(api, registry)
        return None

    if not isinstance(estimate, Estimate):
        print(f"[{api.chain}] {estimate.reason}, using contract fallback")
        probe_bridge_balances(api, registry)
        return None

    print(f"[{api.chain}] FINAL TVL: ${estimate.value:,.2f} ({estimate.strategy})")
    report_allocations(api, estimate.value, config, registry)
    return estimate


def tvl(api, config: EstimatorConfig = STABLECOIN_SPLIT) -> None:
    calculate_chain_tvl(api, config)


def build_adapter(
    config: EstimatorConfig = STABLECOIN_SPLIT,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> Dict[str, Any]:
    """
    Module export: one {"tvl": fn} entry per supported chain plus the
    methodology text and hallmarks consumed by the reporting pipeline.
    """
    chain_tvl = partial(tvl, config=config)
    adapter: Dict[str, Any] = {chain: {"tvl": chain_tvl} for chain in registry.chains}
    adapter["methodology"] = registry.methodology
    adapter["hallmarks"] = list(registry.hallmarks)
    return adapter


ADAPTER = build_adapter()
methodology = ADAPTER["methodology"]
hallmarks = ADAPTER["hallmarks"]
