"""Helpers for the qreph CLI."""
