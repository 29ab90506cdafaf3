"""Campus energy quota ledger and device control service."""
