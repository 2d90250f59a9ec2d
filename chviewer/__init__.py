"""chviewer — a small forward proxy / renderer for 5ch-style bulletin boards."""

__version__ = "0.3.0"
