"""Utility modules for attio-tui."""
