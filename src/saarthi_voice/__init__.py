"""Voice-first interaction layer for the Saarthi medication companion."""

__version__ = "0.1.0"
