"""
Codecs between the record model and each trait ontology format.

* :mod:`.dictionary`: Crop Ontology Trait Dictionary text
* :mod:`.workbook`: Trait Workbook sheets
* :mod:`.obo`: OBO text, including namespace rewriting
"""

from .dictionary import (
    build_dictionary_rows,
    dictionary_headers,
    parse_dictionary,
    records_from_dictionary,
    serialize_dictionary,
)
from .format_utils import generate_id, obo_timestamp
from .obo import Stanza, parse_stanzas, rewrite_namespaces, write_obo
from .workbook import Marker, WorkbookTable, read_workbook, write_workbook

__all__ = [
    "build_dictionary_rows",
    "dictionary_headers",
    "parse_dictionary",
    "records_from_dictionary",
    "serialize_dictionary",
    "generate_id",
    "obo_timestamp",
    "Stanza",
    "parse_stanzas",
    "rewrite_namespaces",
    "write_obo",
    "Marker",
    "WorkbookTable",
    "read_workbook",
    "write_workbook",
]
