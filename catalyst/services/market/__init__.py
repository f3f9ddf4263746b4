"""Market statistics and the confirmation gate."""
