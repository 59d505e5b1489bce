"""Voting permission rules and vote history for reputation-driven communities."""

__version__ = "0.1.0"
