"""Key-value storage used by the vote log."""
