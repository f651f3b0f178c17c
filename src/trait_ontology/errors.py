"""Exceptions raised while reading, checking and writing trait ontologies."""
import json
from typing import Dict


class TraitOntologyError(Exception):
    """Base class for all trait-ontology errors."""


class DictionaryFormatError(TraitOntologyError, ValueError):
    """A value cannot be represented in the Trait Dictionary format."""


class WorkbookFormatError(TraitOntologyError, ValueError):
    """A Trait Workbook is missing a sheet or its root information."""


class ValidationError(TraitOntologyError):
    """A workbook table breaks one of the fixed column rules."""

    def __init__(self, table: str, field: str, message: str):
        self.table = table
        self.field = field
        super().__init__(message)


class RequiredFieldError(ValidationError):
    def __init__(self, table: str, field: str, row: Dict[str, str]):
        self.row = row
        super().__init__(
            table,
            field,
            f"Required column [{field}] does not have a value set in worksheet [{table}]\n"
            f"    ROW: {json.dumps(row)}\n"
            "    You must add the missing data before continuing.",
        )


class UniqueFieldError(ValidationError):
    def __init__(self, table: str, field: str, value: str):
        self.value = value
        super().__init__(
            table,
            field,
            f"Unique column [{field}] contains a duplicated value [{value}] in worksheet [{table}]\n"
            "    You must remove the duplicate values before continuing.",
        )
