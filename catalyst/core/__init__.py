"""Shared configuration, logging and session helpers."""
