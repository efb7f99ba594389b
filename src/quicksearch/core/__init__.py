"""Core: configuration and logging."""
