"""Static configuration: chain/asset registries and RPC resolution."""
