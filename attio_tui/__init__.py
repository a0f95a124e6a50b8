"""attio-tui - a keyboard-driven terminal browser for an Attio workspace."""

__version__ = "0.3.0"
