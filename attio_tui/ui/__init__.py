"""Textual UI for attio-tui."""
