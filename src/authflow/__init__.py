"""authflow - Account registration with one-time email verification codes."""

__version__ = "0.1.0"
