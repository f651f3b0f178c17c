"""Wrappers over general file formats."""
