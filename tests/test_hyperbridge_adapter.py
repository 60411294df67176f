"""End-to-end tests for the Hyperbridge adapter flow and its fallback prober."""

from unittest.mock import MagicMock, patch

import requests

from adapters.tvl.hyperbridge import ADAPTER, build_adapter, calculate_chain_tvl, tvl
from adapters.tvl.hyperbridge_estimator import SINGLE_STABLECOIN, STABLECOIN_SPLIT, STRATEGY_DIRECT
from adapters.tvl.hyperbridge_fallback import bridge_tokens_and_owners, probe_bridge_balances
from adapters.tvl.hyperbridge_indexer import IndexerSnapshot, InsufficientData, TransportError
from config.hyperbridge import HYPERBRIDGE
from conftest import E18, graphql_data, make_snapshot, stat_node, teleport_node

STATS = [stat_node("EVM-1", 300 * E18), stat_node("EVM-42161", 100 * E18)]


class TestFallbackProber:

    def test_matrix_is_tokens_times_bridges(self):
        pairs = bridge_tokens_and_owners("ethereum")

        tokens = {t for t, _ in pairs}
        owners = {o for _, o in pairs}
        assert owners == set(HYPERBRIDGE.bridge_contracts)
        assert HYPERBRIDGE.core_asset("ethereum", "USDC").address in tokens
        assert HYPERBRIDGE.core_asset("ethereum", "WETH").address in tokens
        assert len(pairs) == len(tokens) * len(owners)

    def test_delegates_to_sum_tokens(self, eth_api):
        submitted = probe_bridge_balances(eth_api)

        assert len(eth_api.sum_calls) == 1
        assert len(eth_api.sum_calls[0]) == submitted
        assert eth_api.added == []

    def test_chain_without_tokens_makes_no_call(self, api_factory):
        api = api_factory("solana")

        assert probe_bridge_balances(api) == 0
        assert api.sum_calls == []


class TestCalculateChainTvl:

    def test_transport_error_goes_to_fallback(self, eth_api):
        result = calculate_chain_tvl(eth_api, STABLECOIN_SPLIT, fetch=lambda: TransportError("timeout"))

        assert result is None
        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    def test_insufficient_indexer_data_goes_to_fallback(self, eth_api):
        calculate_chain_tvl(eth_api, STABLECOIN_SPLIT, fetch=lambda: InsufficientData("no stats"))

        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    def test_direct_estimate_is_reported(self, eth_api):
        snapshot = make_snapshot(STATS, [teleport_node("USDC", 1000 * E18, "EVM-1", "EVM-42161")])

        result = calculate_chain_tvl(eth_api, STABLECOIN_SPLIT, fetch=lambda: snapshot)

        assert result.strategy == STRATEGY_DIRECT
        usdc = HYPERBRIDGE.core_asset("ethereum", "USDC").address
        assert (usdc, 700000000) in eth_api.added
        assert eth_api.sum_calls == []

    def test_below_threshold_without_stats_goes_to_fallback(self, eth_api):
        snapshot = make_snapshot([stat_node("EVM-42161", 100 * E18)],
                                 [teleport_node("USDC", 50 * E18, "EVM-1", "EVM-42161")])

        assert calculate_chain_tvl(eth_api, STABLECOIN_SPLIT, fetch=lambda: snapshot) is None
        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    def test_estimation_error_goes_to_fallback(self, eth_api):
        broken = IndexerSnapshot(chain_stats=(), teleports=None)

        assert calculate_chain_tvl(eth_api, STABLECOIN_SPLIT, fetch=lambda: broken) is None
        assert len(eth_api.sum_calls) == 1

    def test_fetch_exception_goes_to_fallback(self, eth_api):
        def fetch():
            raise RuntimeError("indexer client blew up")

        assert calculate_chain_tvl(eth_api, STABLECOIN_SPLIT, fetch=fetch) is None
        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    def test_single_variant_reports_one_token(self, api_factory):
        api = api_factory("arbitrum")
        snapshot = make_snapshot(STATS, [teleport_node("USDC", 20 * E18, "EVM-1", "EVM-42161")])

        calculate_chain_tvl(api, SINGLE_STABLECOIN, fetch=lambda: snapshot)

        assert api.added == [(HYPERBRIDGE.core_asset("arbitrum", "USDC").address, 20 * 10 ** 6)]


class TestTvlEntryPoint:

    @patch("adapters.tvl.hyperbridge_indexer.requests.post")
    def test_indexer_down_probes_bridge_balances(self, mock_post, eth_api):
        mock_post.side_effect = requests.ConnectionError("unreachable")

        assert tvl(eth_api) is None
        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    @patch("adapters.tvl.hyperbridge_indexer.requests.post")
    def test_exported_tvl_reports_estimate(self, mock_post, eth_api):
        resp = MagicMock()
        resp.json.return_value = {"data": graphql_data(
            STATS, [teleport_node("USDC", 1000 * E18, "EVM-1", "EVM-10")])}
        mock_post.return_value = resp

        ADAPTER["ethereum"]["tvl"](eth_api)

        assert len(eth_api.added) == 3
        assert eth_api.sum_calls == []

    @patch("adapters.tvl.hyperbridge_indexer.requests.post")
    def test_stats_list_payload_falls_back(self, mock_post, eth_api):
        resp = MagicMock()
        resp.json.return_value = {"data": {"hyperBridgeChainStats": [{"id": "EVM-1"}]}}
        mock_post.return_value = resp

        tvl(eth_api)

        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    @patch("adapters.tvl.hyperbridge_indexer.requests.post")
    def test_string_node_payload_falls_back(self, mock_post, eth_api):
        resp = MagicMock()
        resp.json.return_value = {"data": {"hyperBridgeChainStats": {"edges": [{"node": "EVM-1"}]}}}
        mock_post.return_value = resp

        tvl(eth_api)

        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1

    @patch("adapters.tvl.hyperbridge_indexer.requests.post")
    def test_infinite_amount_does_not_reach_add_token(self, mock_post, eth_api):
        resp = MagicMock()
        resp.json.return_value = {"data": graphql_data(
            STATS, [teleport_node("USDC", "Infinity", "EVM-1", "EVM-10")])}
        mock_post.return_value = resp

        tvl(eth_api)

        assert eth_api.added == []
        assert len(eth_api.sum_calls) == 1


class TestBuildAdapter:

    def test_exports_every_chain(self):
        adapter = build_adapter()

        for chain in ("ethereum", "arbitrum", "optimism", "base", "bsc", "xdai",
                      "polygon", "soneium", "unichain"):
            assert callable(adapter[chain]["tvl"])
        assert "Hyperbridge" in adapter["methodology"]
        assert adapter["hallmarks"] == list(HYPERBRIDGE.hallmarks)

    def test_variant_is_bound(self, eth_api):
        adapter = build_adapter(SINGLE_STABLECOIN)

        with patch("adapters.tvl.hyperbridge.calculate_chain_tvl") as mock_calc:
            adapter["ethereum"]["tvl"](eth_api)

        mock_calc.assert_called_once_with(eth_api, SINGLE_STABLECOIN)
