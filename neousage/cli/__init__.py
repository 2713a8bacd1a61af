"""CLI module for neousage."""
