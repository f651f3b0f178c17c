"""
trait-ontology: conversion between Trait Workbooks, Trait Dictionaries and OBO.

Architecture
============

* :mod:`.model`: the shared record model (variables, traits, methods, scales, classes, root)
* :mod:`.formats`: codecs that read and write each format from/to the record model
* :mod:`.validation`: required and unique column checks on a record model
* :mod:`.wrappers`: adapters over external sources (xlsx files, the Crop Ontology registry)
* :mod:`.builder`: the build pipeline used by the command line


"""
import importlib_metadata

try:
    __version__ = importlib_metadata.version("trait-ontology")
except importlib_metadata.PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0"  # pragma: no cover

PROGRAM_NAME = "trait-ontology"

from trait_ontology.model import CategoryCounter, TraitRecords  # noqa: E402

__all__ = ["TraitRecords", "CategoryCounter", "PROGRAM_NAME", "__version__"]
