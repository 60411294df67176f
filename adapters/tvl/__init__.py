"""Per-protocol TVL adapters."""
