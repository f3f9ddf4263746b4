"""News ingestion, classification and scoring."""
