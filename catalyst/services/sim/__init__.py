"""Paper-trading ledger, fill export and replay loaders."""
