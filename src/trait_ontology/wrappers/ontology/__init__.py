"""Wrappers over ontology files and registries."""
