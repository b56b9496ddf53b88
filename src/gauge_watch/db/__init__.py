"""Sqlite run ledger."""
