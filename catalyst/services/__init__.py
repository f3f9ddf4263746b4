"""Service packages composing the signal pipeline."""
