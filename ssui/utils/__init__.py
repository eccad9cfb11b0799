"""Logging setup and verbosity-aware pipeline reporting."""
