"""Data models for attio-tui."""
