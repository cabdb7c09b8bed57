"""Flask REST surface for the expense ledger."""
