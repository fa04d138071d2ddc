"""Store staff bot and async client for the POS/inventory edge functions."""

__version__ = "1.0.0"
