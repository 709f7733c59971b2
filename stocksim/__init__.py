"""Virtual stock portfolio simulator — simulated market, ledger, and persisted account."""
