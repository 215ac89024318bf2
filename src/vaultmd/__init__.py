"""vaultmd - a local, git-context-aware versioned artifact vault."""

__version__ = "0.1.0"
