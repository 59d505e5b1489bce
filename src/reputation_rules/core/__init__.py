"""Configuration, key layout and errors for reputation rules."""
