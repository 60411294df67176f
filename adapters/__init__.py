"""TVL adapters and the execution context they report into."""
