"""Command-line tools for Bizdir."""
