"""Command line interface for swanclient."""
