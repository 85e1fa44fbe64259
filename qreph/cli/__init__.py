"""Command line interface for qreph."""
