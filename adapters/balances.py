# adapters/balances.py
"""
Execution context handed to TVL adapters.

A ChainApi carries the chain being evaluated and the balance sheet the adapter
reports into:
- add_token(token, amount): direct report of a raw integer amount
- sum_tokens(tokens_and_owners): read balanceOf(owner) for each pair over RPC
  and add the results

Amounts are raw token units; pricing happens downstream.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from web3 import Web3

from config.hyperbridge import NATIVE_TOKEN

ERC20_BALANCE_ABI = [
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def _safe_call(func, default=None):
    """Safely call a contract function."""
    try:
        return func()
    except Exception as e:
        print(f"[ChainApi] ⚠️ call failed: {e}")
        return default


class ChainApi:
    """
    Balance sheet for one chain.

    web3 is created lazily from config.rpc_config when sum_tokens first needs
    it, so direct-report runs never touch an RPC.
    """

    def __init__(
        self,
        chain: str,
        web3: Optional[Web3] = None,
        block: Optional[int] = None,
        web3_factory: Optional[Callable[[str], Web3]] = None,
    ):
        self.chain = chain
        self.block = block
        self._web3 = web3
        self._web3_factory = web3_factory
        self.balances: Dict[str, int] = {}

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            if self._web3_factory is None:
                from config.rpc_config import setup_web3
                self._web3_factory = setup_web3
            self._web3 = self._web3_factory(self.chain)
        return self._web3

    def add_token(self, token: str, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"raw amount must be an integer, got {amount!r}")
        if amount < 0:
            raise ValueError(f"raw amount must be non-negative, got {amount}")
        key = Web3.to_checksum_address(token)
        self.balances[key] = self.balances.get(key, 0) + amount

    def balance_of(self, token: str, owner: str) -> int:
        """Raw balance of owner in token at self.block (0 on failure)."""
        w3 = self.web3
        call_kwargs = {'block_identifier': self.block} if self.block is not None else {}
        owner = Web3.to_checksum_address(owner)

        if token.lower() == NATIVE_TOKEN:
            return _safe_call(lambda: w3.eth.get_balance(owner, **call_kwargs), 0)

        contract = w3.eth.contract(address=Web3.to_checksum_address(token), abi=ERC20_BALANCE_ABI)
        return _safe_call(lambda: contract.functions.balanceOf(owner).call(**call_kwargs), 0)

    def sum_tokens(self, tokens_and_owners: Iterable[Tuple[str, str]]) -> Dict[str, int]:
        """
        Add on-chain balances for every distinct (token, owner) pair.

        Returns:
            The balance sheet after the additions
        """
        seen = set()
        pairs: List[Tuple[str, str]] = []
        for token, owner in tokens_and_owners:
            key = (token.lower(), owner.lower())
            if key in seen:
                continue
            seen.add(key)
            pairs.append((token, owner))

        for token, owner in pairs:
            raw = self.balance_of(token, owner)
            if raw:
                self.add_token(token, int(raw))
        return self.balances
