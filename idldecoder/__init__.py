"""Decode Anchor program instructions, accounts and events from an IDL."""

__version__ = "0.1.1"
__all__ = ["__version__"]