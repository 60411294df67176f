"""
RPC URL resolution - builds Alchemy URLs from an API key, public RPCs otherwise.
"""

import os
from typing import Optional

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

# Alchemy URL patterns
ALCHEMY_PATTERNS = {
    'ethereum': 'https://eth-mainnet.g.alchemy.com/v2/{key}',
    'optimism': 'https://opt-mainnet.g.alchemy.com/v2/{key}',
    'bsc': 'https://bnb-mainnet.g.alchemy.com/v2/{key}',
    'xdai': 'https://gnosis-mainnet.g.alchemy.com/v2/{key}',
    'polygon': 'https://polygon-mainnet.g.alchemy.com/v2/{key}',
    'base': 'https://base-mainnet.g.alchemy.com/v2/{key}',
    'arbitrum': 'https://arb-mainnet.g.alchemy.com/v2/{key}',
    'soneium': 'https://soneium-mainnet.g.alchemy.com/v2/{key}',
    'unichain': 'https://unichain-mainnet.g.alchemy.com/v2/{key}',
}

# Public RPCs (no auth needed)
PUBLIC_RPCS = {
    'ethereum': 'https://eth.llamarpc.com',
    'optimism': 'https://mainnet.optimism.io',
    'bsc': 'https://bsc-dataseed.binance.org',
    'xdai': 'https://rpc.gnosischain.com',
    'polygon': 'https://polygon-rpc.com',
    'base': 'https://mainnet.base.org',
    'arbitrum': 'https://arb1.arbitrum.io/rpc',
    'soneium': 'https://rpc.soneium.org',
    'unichain': 'https://mainnet.unichain.org',
}

# Chains whose blocks carry extra data that web3 rejects without the POA middleware
POA_CHAINS = ['bsc', 'polygon', 'xdai']


def get_rpc_url(chain: str, api_key: Optional[str] = None) -> str:
    """
    Get RPC URL for a chain.

    Args:
        chain: Chain name (e.g., 'ethereum', 'arbitrum')
        api_key: Alchemy API key (uses ALCHEMY_API_KEY env var if not provided)

    Returns:
        Complete RPC URL
    """
    chain = chain.lower()
    env_override = os.getenv(f'{chain.upper()}_RPC')
    if env_override:
        return env_override

    key = api_key or os.getenv('ALCHEMY_API_KEY')
    if key and chain in ALCHEMY_PATTERNS:
        return ALCHEMY_PATTERNS[chain].format(key=key)

    if chain in PUBLIC_RPCS:
        return PUBLIC_RPCS[chain]

    raise ValueError(f"Unknown chain: {chain}")


def setup_web3(chain: str, api_key: Optional[str] = None, timeout: int = 30) -> Web3:
    """Create a Web3 instance for a chain."""
    rpc_url = get_rpc_url(chain, api_key)
    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': timeout}))

    if chain.lower() in POA_CHAINS:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    return w3
