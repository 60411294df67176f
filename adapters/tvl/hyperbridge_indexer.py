"""
Hyperbridge GraphQL indexer client

Architecture:
- One public indexer (Polytope "nexus") serves per-chain bridge statistics
  and every TokenGateway teleport event
- A single fixed query pulls both collections; there is no server-side
  filtering by chain, callers filter locally

Fetch result is one of:
- IndexerSnapshot: parsed chain stats + teleport events
- TransportError: HTTP/JSON/GraphQL failure (logged, never raised)
- InsufficientData: the response carried no chain stats at all
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from config.hyperbridge import HYPERBRIDGE

QUERY_TEMPLATE = """
query {
  hyperBridgeChainStats(first: %(chain_stats_limit)d) {
    edges {
      node {
        id
        totalTransfersIn
        numberOfMessagesSent
        numberOfDeliveredMessages
        protocolFeesEarned
      }
    }
  }
  tokenGatewayAssetTeleporteds(first: %(teleports_limit)d) {
    edges {
      node {
        id
        amount
        assetId
        sourceChain
        destChain
      }
    }
  }
}
"""

TELEPORT_QUERY = QUERY_TEMPLATE % {
    "chain_stats_limit": HYPERBRIDGE.chain_stats_limit,
    "teleports_limit": HYPERBRIDGE.teleports_limit,
}


@dataclass(frozen=True)
class ChainStat:
    chain_id: Optional[int]
    total_transfers_in: float
    messages_sent: int = 0
    messages_delivered: int = 0
    protocol_fees_earned: float = 0.0


@dataclass(frozen=True)
class TeleportEvent:
    id: str
    asset_id: str
    amount: float
    source_chain: Optional[int]
    dest_chain: Optional[int]


@dataclass(frozen=True)
class IndexerSnapshot:
    chain_stats: Tuple[ChainStat, ...]
    teleports: Tuple[TeleportEvent, ...]


@dataclass(frozen=True)
class TransportError:
    reason: str


@dataclass(frozen=True)
class InsufficientData:
    reason: str


FetchResult = Union[IndexerSnapshot, TransportError, InsufficientData]


def parse_chain_id(raw: Any) -> Optional[int]:
    """
    Parse an indexer chain identifier.

    Stats and teleports use "EVM-<chainId>"; substrate chains
    ("POLKADOT-3367", ...) and anything non-numeric return None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if text.upper().startswith("EVM-"):
        text = text[4:]
    try:
        return int(text)
    except ValueError:
        return None


def _to_float(value: Any, field_name: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        print(f"[indexer] ⚠️ unparseable {field_name}={value!r}, counting as 0")
        return 0.0
    if not math.isfinite(parsed):
        print(f"[indexer] ⚠️ non-finite {field_name}={value!r}, counting as 0")
        return 0.0
    return parsed


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _nodes(collection: Any) -> List[Dict[str, Any]]:
    """Node dicts of a GraphQL connection; anything not shaped like one is skipped."""
    if not isinstance(collection, dict):
        return []
    edges = collection.get("edges") or []
    if not isinstance(edges, list):
        return []
    nodes = []
    for edge in edges:
        node = edge.get("node") if isinstance(edge, dict) else None
        if isinstance(node, dict):
            nodes.append(node)
        else:
            print(f"[indexer] ⚠️ skipping malformed edge {edge!r}")
    return nodes


def parse_chain_stat(node: Dict[str, Any]) -> ChainStat:
    return ChainStat(
        chain_id=parse_chain_id(node.get("id")),
        total_transfers_in=_to_float(node.get("totalTransfersIn"), "totalTransfersIn"),
        messages_sent=_to_int(node.get("numberOfMessagesSent")),
        messages_delivered=_to_int(node.get("numberOfDeliveredMessages")),
        protocol_fees_earned=_to_float(node.get("protocolFeesEarned"), "protocolFeesEarned"),
    )


def parse_teleport(node: Dict[str, Any]) -> TeleportEvent:
    return TeleportEvent(
        id=str(node.get("id", "")),
        asset_id=str(node.get("assetId") or ""),
        amount=_to_float(node.get("amount"), "amount"),
        source_chain=parse_chain_id(node.get("sourceChain")),
        dest_chain=parse_chain_id(node.get("destChain")),
    )


def parse_snapshot(data: Dict[str, Any]) -> Union[IndexerSnapshot, InsufficientData]:
    """Turn the GraphQL `data` object into an IndexerSnapshot."""
    if not data.get("hyperBridgeChainStats"):
        return InsufficientData("indexer returned no chain stats")
    if not isinstance(data["hyperBridgeChainStats"], dict):
        print("[indexer] ⚠️ hyperBridgeChainStats is not a connection object")
        return InsufficientData("unexpected chain stats shape")

    stats = tuple(parse_chain_stat(n) for n in _nodes(data.get("hyperBridgeChainStats")))
    teleports = tuple(parse_teleport(n) for n in _nodes(data.get("tokenGatewayAssetTeleporteds")))
    return IndexerSnapshot(chain_stats=stats, teleports=teleports)


def fetch_indexer_snapshot(
    endpoint: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> FetchResult:
    """
    Run the fixed teleport query against the indexer.

    Args:
        endpoint: GraphQL URL (defaults to the configured indexer)
        session: Optional requests session (a plain requests.post otherwise)
        timeout: Request timeout in seconds; None leaves the transport default

    Returns:
        IndexerSnapshot, TransportError or InsufficientData. Never raises for
        network, HTTP or payload problems.
    """
    url = endpoint or HYPERBRIDGE.endpoint
    http = session or requests

    print("[indexer] Fetching Hyperbridge chain stats and teleports...")
    try:
        resp = http.post(
            url,
            json={"query": TELEPORT_QUERY},
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as e:
        print(f"[indexer] ⚠️ request to {url} failed: {e}")
        return TransportError(str(e))
    except ValueError as e:
        print(f"[indexer] ⚠️ response from {url} is not valid JSON: {e}")
        return TransportError(f"invalid JSON: {e}")

    if not isinstance(payload, dict):
        print(f"[indexer] ⚠️ unexpected payload type {type(payload).__name__}")
        return TransportError("unexpected payload")

    if payload.get("errors"):
        print(f"[indexer] ⚠️ GraphQL errors: {payload['errors']}")
        return TransportError(f"GraphQL errors: {payload['errors']}")

    data = payload.get("data")
    if not isinstance(data, dict):
        print("[indexer] ⚠️ response carried no data")
        return TransportError("missing data")

    try:
        return parse_snapshot(data)
    except (AttributeError, TypeError, ValueError) as e:
        print(f"[indexer] ⚠️ unparseable payload: {e}")
        return TransportError(f"unparseable payload: {e}")
