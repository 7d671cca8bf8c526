"""Shared utilities (logging, configuration)."""
