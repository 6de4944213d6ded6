"""Command-line interface for WireView."""
