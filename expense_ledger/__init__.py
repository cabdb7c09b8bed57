"""Console entry point for the expense ledger."""
