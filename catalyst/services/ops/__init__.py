"""Operational alerts."""
