"""Command-line interface for renderlint."""
