"""
Hyperbridge per-chain value estimator

Hyperbridge is burn-and-mint for most assets, so no single contract balance
represents what was bridged to a chain. The estimate is derived from indexer
data instead, first strategy that yields a usable number wins:

1. Direct: sum of teleports that start or end on the chain
2. Proportional: chain's share of network inbound volume x total teleported value
3. Otherwise InsufficientData (caller falls back to on-chain balances)

Amount normalization divides every teleport amount by 1e18. The indexer
reports USDC/USDT in 6 decimals, so stablecoin teleports are understated by
1e12 under that rule; `normalize_per_asset=True` switches to the per-asset
decimal table instead.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from config.hyperbridge import HYPERBRIDGE, HyperbridgeConfig
from .hyperbridge_indexer import IndexerSnapshot, InsufficientData, TeleportEvent

UNIFORM_DECIMALS = 18

STRATEGY_DIRECT = "direct"
STRATEGY_PROPORTIONAL = "proportional"


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Knobs that distinguish the adapter variants.

    allocation_split: (symbol, fraction) in preference order
    first_match_only: report only the first present token of the split
    min_direct_threshold: direct sum must exceed this; None disables strategy 1
    min_proportional_floor: proportional estimate must exceed this
    reference_asset: token used when no split token exists on the chain
    normalize_per_asset: divide by each asset's decimals instead of 1e18
    """
    name: str
    allocation_split: Tuple[Tuple[str, float], ...]
    first_match_only: bool = False
    min_direct_threshold: Optional[float] = 100.0
    min_proportional_floor: float = 1.0
    reference_asset: str = "WETH"
    normalize_per_asset: bool = False

    def __post_init__(self):
        if not self.allocation_split:
            raise ValueError(f"{self.name}: allocation_split is empty")
        for symbol, pct in self.allocation_split:
            if not 0 < pct <= 1:
                raise ValueError(f"{self.name}: {symbol} fraction {pct} outside (0, 1]")
        if not self.first_match_only:
            total = sum(pct for _, pct in self.allocation_split)
            if total > 1 + 1e-9:
                raise ValueError(f"{self.name}: allocation split sums to {total:.4f} > 1")


# 70/20/10 across the three stablecoins, direct strategy gated at $100
STABLECOIN_SPLIT = EstimatorConfig(
    name="split",
    allocation_split=(("USDC", 0.7), ("USDT", 0.2), ("DAI", 0.1)),
    first_match_only=False,
    min_direct_threshold=100.0,
    min_proportional_floor=1.0,
)

# Whole estimate in the first available stablecoin, no direct threshold
SINGLE_STABLECOIN = EstimatorConfig(
    name="single",
    allocation_split=(("USDC", 1.0), ("USDT", 1.0), ("DAI", 1.0)),
    first_match_only=True,
    min_direct_threshold=0.0,
    min_proportional_floor=1.0,
)

VARIANTS = {
    STABLECOIN_SPLIT.name: STABLECOIN_SPLIT,
    SINGLE_STABLECOIN.name: SINGLE_STABLECOIN,
}


@dataclass(frozen=True)
class Estimate:
    value: float
    strategy: str
    proportion: Optional[float] = None


EstimateResult = Union[Estimate, InsufficientData]


@dataclass(frozen=True)
class AssetSummary:
    symbol: str
    transfers: int
    chains: int
    value: float


def asset_symbol(asset_id: str, registry: HyperbridgeConfig = HYPERBRIDGE) -> str:
    return registry.asset_ids.get(asset_id, asset_id)


def normalize_amount(
    event: TeleportEvent,
    config: EstimatorConfig,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> float:
    if config.normalize_per_asset:
        decimals = registry.decimals_for_asset(asset_symbol(event.asset_id, registry))
    else:
        decimals = UNIFORM_DECIMALS
    return event.amount / 10 ** decimals


def in_scope(event: TeleportEvent, registry: HyperbridgeConfig = HYPERBRIDGE) -> bool:
    """An event counts only when both endpoints are chains we know."""
    return event.source_chain in registry.chain_ids and event.dest_chain in registry.chain_ids


def direct_involvement(
    teleports,
    chain_id: int,
    config: EstimatorConfig,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> float:
    """Normalized sum of in-scope teleports with source or destination on chain_id."""
    return sum(
        normalize_amount(t, config, registry)
        for t in teleports
        if in_scope(t, registry) and chain_id in (t.source_chain, t.dest_chain)
    )


def total_teleport_value(
    teleports,
    config: EstimatorConfig,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> float:
    return sum(normalize_amount(t, config, registry) for t in teleports if in_scope(t, registry))


def chain_transfer_volumes(chain_stats, registry: HyperbridgeConfig = HYPERBRIDGE) -> Dict[str, float]:
    """Inbound transfer volume (1e18-normalized) per mapped chain name."""
    volumes: Dict[str, float] = {}
    for stat in chain_stats:
        name = registry.chain_ids.get(stat.chain_id)
        if name is None:
            continue
        volumes[name] = volumes.get(name, 0.0) + stat.total_transfers_in / 10 ** UNIFORM_DECIMALS
    return volumes


def chain_proportion(chain: str, volumes: Dict[str, float]) -> Optional[float]:
    """Share of network volume for chain; None when there is nothing to divide by."""
    total = sum(volumes.values())
    chain_volume = volumes.get(chain, 0.0)
    if total <= 0 or chain_volume <= 0:
        return None
    return chain_volume / total


def summarize_teleports(
    teleports,
    config: EstimatorConfig = STABLECOIN_SPLIT,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> List[AssetSummary]:
    """Per-asset transfer count, distinct source chains and normalized value."""
    grouped: Dict[str, List[TeleportEvent]] = {}
    for t in teleports:
        if not in_scope(t, registry):
            continue
        grouped.setdefault(asset_symbol(t.asset_id, registry), []).append(t)

    summaries = []
    for symbol, events in grouped.items():
        chains = {t.source_chain if t.source_chain is not None else t.dest_chain for t in events}
        summaries.append(AssetSummary(
            symbol=symbol,
            transfers=len(events),
            chains=len(chains),
            value=sum(normalize_amount(t, config, registry) for t in events),
        ))
    summaries.sort(key=lambda s: s.value, reverse=True)
    return summaries


def estimate_chain_value(
    snapshot: IndexerSnapshot,
    chain: str,
    config: EstimatorConfig = STABLECOIN_SPLIT,
    registry: HyperbridgeConfig = HYPERBRIDGE,
) -> EstimateResult:
    """
    Estimate the USD value bridged to `chain`.

    Args:
        snapshot: Parsed indexer response
        chain: Chain name being evaluated (e.g. 'arbitrum')
        config: Variant thresholds and normalization rule
        registry: Static chain/asset tables

    Returns:
        Estimate (value > 0 plus the strategy used) or InsufficientData
    """
    chain_id = registry.chain_id_for(chain)
    if chain_id is None:
        return InsufficientData(f"{chain} is not a Hyperbridge chain")

    print(f"[{chain}] Chain stats: {len(snapshot.chain_stats)} | Teleports: {len(snapshot.teleports)}")
    for s in summarize_teleports(snapshot.teleports, config, registry):
        print(f"  {s.symbol}: {s.transfers} transfers, {s.chains} chains, ${s.value:,.2f}")

    if config.min_direct_threshold is not None:
        direct = direct_involvement(snapshot.teleports, chain_id, config, registry)
        if direct > config.min_direct_threshold:
            print(f"[{chain}] Using direct teleport involvement: ${direct:,.2f}")
            return Estimate(value=direct, strategy=STRATEGY_DIRECT)
        if direct > 0:
            print(f"[{chain}] Direct teleport value ${direct:,.2f} below threshold "
                  f"${config.min_direct_threshold:,.2f}")

    volumes = chain_transfer_volumes(snapshot.chain_stats, registry)
    if chain not in volumes:
        return InsufficientData(f"no chain stats for {chain}")

    proportion = chain_proportion(chain, volumes)
    if proportion is None:
        return InsufficientData(f"no transfer volume for {chain}")

    total = total_teleport_value(snapshot.teleports, config, registry)
    value = total * proportion
    if value <= config.min_proportional_floor:
        return InsufficientData(
            f"proportional estimate ${value:,.2f} not above ${config.min_proportional_floor:,.2f}"
        )

    print(f"[{chain}] Using proportional distribution: {proportion * 100:.1f}% "
          f"of ${total:,.2f} = ${value:,.2f}")
    return Estimate(value=value, strategy=STRATEGY_PROPORTIONAL, proportion=proportion)
