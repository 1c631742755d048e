"""Command implementations for the invar CLI."""
