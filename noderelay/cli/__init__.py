"""Command line interface for noderelay."""
