"""Wrappers on top of external data sources.

Wrappers read (and where it makes sense, write) the media that trait
ontologies live in: xlsx workbooks, OBO files and the Crop Ontology
registry.
"""

from trait_ontology.wrappers.base_wrapper import BaseWrapper

__all__ = [
    "BaseWrapper",
    "get_wrapper",
]


def get_all_subclasses(cls):
    """Recursively get all subclasses of a given class."""
    direct_subclasses = cls.__subclasses__()
    return direct_subclasses + [
        s for subclass in direct_subclasses for s in get_all_subclasses(subclass)
    ]


def get_wrapper(name: str, **kwargs) -> BaseWrapper:
    from trait_ontology.wrappers.general.xlsx_wrapper import XLSXWrapper  # noqa
    from trait_ontology.wrappers.ontology.cropontology_wrapper import CropOntologyWrapper  # noqa
    from trait_ontology.wrappers.ontology.oboformat_wrapper import OBOFormatWrapper  # noqa

    for c in get_all_subclasses(BaseWrapper):
        if c.name == name:
            return c(**kwargs)
    raise ValueError(f"Unknown wrapper {name}, not found in {get_all_subclasses(BaseWrapper)}")

