"""Required and unique column checks for the tables of a trait ontology."""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from trait_ontology.errors import RequiredFieldError, UniqueFieldError
from trait_ontology.model.records import (
    METHODS,
    ROOT,
    SCALES,
    TRAIT_CLASSES,
    TRAITS,
    VARIABLE_KEY,
    VARIABLES,
    TraitRecords,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableRules:
    required: Tuple[str, ...] = ()
    unique: Tuple[str, ...] = ()


RULES: Dict[str, TableRules] = {
    VARIABLES: TableRules(
        required=("Variable ID", "Variable name", "Trait name", "Method name", "Scale name"),
        unique=("Variable ID", "Variable name", "Variable synonyms", VARIABLE_KEY),
    ),
    TRAITS: TableRules(
        required=("Trait ID", "Trait name", "Trait class"),
        unique=("Trait ID", "Trait name"),
    ),
    METHODS: TableRules(
        required=("Method ID", "Method name", "Method class"),
        unique=("Method ID", "Method name"),
    ),
    SCALES: TableRules(
        required=("Scale ID", "Scale name"),
        unique=("Scale ID", "Scale name"),
    ),
    TRAIT_CLASSES: TableRules(
        required=("Trait class ID", "Trait class name"),
        unique=("Trait class ID", "Trait class name"),
    ),
    ROOT: TableRules(required=("Root ID", "Root name", "namespace")),
}


def check_table(table: str, rows: Iterable[Mapping[str, Optional[str]]]) -> None:
    """
    Check the rows of one table against its rules.

    Raises on the first row missing a required value, then on the first
    duplicated value of a unique column.

    :param table: sheet name
    :param rows: header -> value rows
    :return:
    """
    rules = RULES.get(table)
    if rules is None:
        return
    rows = list(rows)
    for row in rows:
        for column in rules.required:
            if not row.get(column):
                raise RequiredFieldError(table, column, dict(row))
    for column in rules.unique:
        seen = set()
        for row in rows:
            value = row.get(column)
            if not value:
                continue
            if value in seen:
                raise UniqueFieldError(table, column, value)
            seen.add(value)
    logger.debug(f"Worksheet [{table}] passed {len(rows)} rows")


def validate_records(records: TraitRecords, force: bool = False) -> None:
    """
    Check every table of a record model, stopping at the first violation.

    :param records:
    :param force: skip all checks
    :return:
    """
    if force:
        logger.warning("Skipping the required and unique column checks")
        return
    for table, table_records in records.tables().items():
        check_table(table, [r.to_row() for r in table_records])
    logger.info("Trait workbook passed the required and unique column checks")
