"""Command line utilities for operating the vote log."""
