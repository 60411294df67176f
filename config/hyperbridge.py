"""
Hyperbridge adapter configuration.

Reads config/hyperbridge.yaml once at import time and exposes it as frozen
dataclasses and read-only mappings:

    from config.hyperbridge import HYPERBRIDGE

    HYPERBRIDGE.chain_ids[1]                     # 'ethereum'
    HYPERBRIDGE.core_asset('base', 'USDC')       # CoreAsset(...)

Set HYPERBRIDGE_GRAPHQL_ENDPOINT to point the indexer query elsewhere.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

CONFIG_PATH = Path(__file__).resolve().parent / "hyperbridge.yaml"

ENDPOINT_ENV_VAR = "HYPERBRIDGE_GRAPHQL_ENDPOINT"

NATIVE_TOKEN = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class CoreAsset:
    symbol: str
    address: str
    decimals: int

    @property
    def is_native(self) -> bool:
        return self.address.lower() == NATIVE_TOKEN


@dataclass(frozen=True)
class HyperbridgeConfig:
    endpoint: str
    chain_stats_limit: int
    teleports_limit: int
    bridge_contracts: Tuple[str, ...]
    chain_ids: Mapping[int, str]
    asset_ids: Mapping[str, str]
    asset_decimals: Mapping[str, int]
    default_asset_decimals: int
    reference_prices: Mapping[str, float]
    core_assets: Mapping[str, Mapping[str, CoreAsset]]
    fallback_tokens: Tuple[str, ...]
    methodology: str
    hallmarks: Tuple[Tuple[int, str], ...] = field(default_factory=tuple)

    @property
    def chains(self) -> Tuple[str, ...]:
        return tuple(self.chain_ids.values())

    def chain_id_for(self, chain: str) -> Optional[int]:
        """Reverse lookup of the chain-id map; None for unsupported chains."""
        for chain_id, name in self.chain_ids.items():
            if name == chain:
                return chain_id
        return None

    def core_asset(self, chain: str, symbol: str) -> Optional[CoreAsset]:
        return self.core_assets.get(chain, {}).get(symbol)

    def decimals_for_asset(self, symbol: str) -> int:
        return self.asset_decimals.get(symbol, self.default_asset_decimals)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "HyperbridgeConfig":
        indexer = d.get("indexer") or {}
        endpoint = os.environ.get(ENDPOINT_ENV_VAR) or indexer.get("endpoint")
        if not endpoint:
            raise ValueError("indexer.endpoint is required")

        chain_ids = {int(k): str(v) for k, v in (d.get("chains") or {}).items()}
        if len(set(chain_ids.values())) != len(chain_ids):
            raise ValueError("chains: every chain name must map to exactly one id")

        decimals = dict(d.get("asset_decimals") or {})
        default_decimals = int(decimals.pop("default", 18))

        core_assets: Dict[str, Mapping[str, CoreAsset]] = {}
        for chain, assets in (d.get("core_assets") or {}).items():
            parsed = {}
            for symbol, entry in (assets or {}).items():
                if "address" not in entry:
                    raise ValueError(f"core_assets.{chain}.{symbol}: missing address")
                parsed[symbol] = CoreAsset(
                    symbol=symbol,
                    address=str(entry["address"]),
                    decimals=int(entry.get("decimals", 18)),
                )
            core_assets[chain] = MappingProxyType(parsed)

        hallmarks = tuple((int(ts), str(label)) for ts, label in (d.get("hallmarks") or []))

        return HyperbridgeConfig(
            endpoint=endpoint,
            chain_stats_limit=int(indexer.get("chain_stats_limit", 50)),
            teleports_limit=int(indexer.get("teleports_limit", 5000)),
            bridge_contracts=tuple((d.get("bridge_contracts") or {}).values()),
            chain_ids=MappingProxyType(chain_ids),
            asset_ids=MappingProxyType(dict(d.get("asset_ids") or {})),
            asset_decimals=MappingProxyType({k: int(v) for k, v in decimals.items()}),
            default_asset_decimals=default_decimals,
            reference_prices=MappingProxyType(
                {k: float(v) for k, v in (d.get("reference_prices") or {}).items()}
            ),
            core_assets=MappingProxyType(core_assets),
            fallback_tokens=tuple(d.get("fallback_tokens") or ()),
            methodology=str(d.get("methodology", "")).strip(),
            hallmarks=hallmarks,
        )


def load_config(path: Path = CONFIG_PATH) -> HyperbridgeConfig:
    with path.open("r") as f:
        raw = yaml.safe_load(f) or {}
    return HyperbridgeConfig.from_dict(raw)


HYPERBRIDGE = load_config()
