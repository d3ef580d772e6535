"""Blockchain client implementations."""
