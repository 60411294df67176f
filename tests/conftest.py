"""Shared fixtures: indexer payload builders and a recording execution context."""

import pytest

from adapters.tvl.hyperbridge_indexer import IndexerSnapshot, parse_snapshot

E18 = 10 ** 18


def stat_node(chain_id, transfers_in, sent=0, delivered=0, fees=0):
    return {
        "node": {
            "id": chain_id,
            "totalTransfersIn": str(transfers_in),
            "numberOfMessagesSent": str(sent),
            "numberOfDeliveredMessages": str(delivered),
            "protocolFeesEarned": str(fees),
        }
    }


def teleport_node(asset_id, amount, source, dest, id_="0x1"):
    return {
        "node": {
            "id": id_,
            "amount": str(amount),
            "assetId": asset_id,
            "sourceChain": source,
            "destChain": dest,
        }
    }


def graphql_data(stats, teleports):
    return {
        "hyperBridgeChainStats": {"edges": stats},
        "tokenGatewayAssetTeleporteds": {"edges": teleports},
    }


def make_snapshot(stats, teleports) -> IndexerSnapshot:
    snapshot = parse_snapshot(graphql_data(stats, teleports))
    assert isinstance(snapshot, IndexerSnapshot)
    return snapshot


class RecordingApi:
    """Stands in for the aggregation helper; records every report."""

    def __init__(self, chain):
        self.chain = chain
        self.added = []
        self.sum_calls = []

    def add_token(self, token, amount):
        self.added.append((token, amount))

    def sum_tokens(self, tokens_and_owners):
        self.sum_calls.append(list(tokens_and_owners))


@pytest.fixture
def api_factory():
    return RecordingApi


@pytest.fixture
def eth_api():
    return RecordingApi("ethereum")
