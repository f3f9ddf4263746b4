"""Entry sizing and exit rules."""
