"""Command-line interface for chunkreader."""
