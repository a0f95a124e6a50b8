"""Attio API services for attio-tui."""
