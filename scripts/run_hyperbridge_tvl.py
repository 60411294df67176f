#!/usr/bin/env python3
"""
Run the Hyperbridge TVL adapter for one chain (or all) and print the balance sheet.

Usage:
    python scripts/run_hyperbridge_tvl.py --chain arbitrum
    python scripts/run_hyperbridge_tvl.py --all --variant single
    python scripts/run_hyperbridge_tvl.py --all --out data/out/hyperbridge_tvl.csv
    python scripts/run_hyperbridge_tvl.py --analysis
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd

from adapters.balances import ChainApi
from adapters.tvl.hyperbridge import calculate_chain_tvl
from adapters.tvl.hyperbridge_estimator import VARIANTS, summarize_teleports
from adapters.tvl.hyperbridge_indexer import IndexerSnapshot, fetch_indexer_snapshot
from config.hyperbridge import HYPERBRIDGE


def run_chain(chain: str, variant: str, snapshot_result, block=None):
    """Run the adapter for one chain against a pre-fetched indexer result."""
    print(f"\n{'='*60}")
    print(f"Hyperbridge TVL: {chain}")
    print('='*60)

    api = ChainApi(chain, block=block)
    estimate = calculate_chain_tvl(api, VARIANTS[variant], fetch=lambda: snapshot_result)

    symbols = {a.address.lower(): a.symbol for a in HYPERBRIDGE.core_assets.get(chain, {}).values()}
    ts = int(datetime.now(timezone.utc).timestamp())
    rows = []
    for token, amount in api.balances.items():
        rows.append({
            'timestamp': ts,
            'chain': chain,
            'variant': variant,
            'strategy': estimate.strategy if estimate else 'fallback',
            'estimate_usd': estimate.value if estimate else None,
            'symbol': symbols.get(token.lower(), '(unknown)'),
            'token': token,
            'amount_raw': amount,
        })

    if rows:
        for r in rows:
            print(f"  {r['symbol']:<8} {r['token']}  {r['amount_raw']}")
    else:
        print("  (no balances reported)")
    return rows


def print_analysis(snapshot_result):
    if not isinstance(snapshot_result, IndexerSnapshot):
        print(f"❌ No indexer data: {snapshot_result.reason}")
        return
    print(f"Chain stats: {len(snapshot_result.chain_stats)}")
    for stat in snapshot_result.chain_stats:
        name = HYPERBRIDGE.chain_ids.get(stat.chain_id, f"(unmapped {stat.chain_id})")
        print(f"  {name:<12} in={stat.total_transfers_in / 1e18:,.2f} "
              f"sent={stat.messages_sent} delivered={stat.messages_delivered}")
    print(f"\nTeleports: {len(snapshot_result.teleports)}")
    for s in summarize_teleports(snapshot_result.teleports):
        print(f"  {s.symbol}: {s.transfers} transfers, {s.chains} chains, ${s.value:,.2f}")


def main():
    parser = argparse.ArgumentParser(description='Run the Hyperbridge TVL adapter')
    parser.add_argument('--chain', choices=list(HYPERBRIDGE.chains), help='Chain to evaluate')
    parser.add_argument('--all', action='store_true', help='Evaluate every supported chain')
    parser.add_argument('--variant', choices=sorted(VARIANTS), default='split',
                        help='Allocation variant (default: split)')
    parser.add_argument('--block', type=int, default=None,
                        help='Block for fallback balance reads (default: latest)')
    parser.add_argument('--timeout', type=float, default=None, help='Indexer request timeout (seconds)')
    parser.add_argument('--out', default=None, help='Write the balance sheet to this CSV')
    parser.add_argument('--analysis', action='store_true', help='Print indexer stats and exit')

    args = parser.parse_args()

    snapshot_result = fetch_indexer_snapshot(timeout=args.timeout)

    if args.analysis:
        print_analysis(snapshot_result)
        return

    if not args.chain and not args.all:
        parser.error('pass --chain or --all')

    chains = list(HYPERBRIDGE.chains) if args.all else [args.chain]
    rows = []
    for chain in chains:
        try:
            rows.extend(run_chain(chain, args.variant, snapshot_result, args.block))
        except Exception as e:
            print(f"❌ {chain}: {e}")

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(rows).to_csv(out_path, index=False)
        print(f"\n💾 Wrote {len(rows)} rows → {out_path}")


if __name__ == '__main__':
    main()
