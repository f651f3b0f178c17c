"""
Trait Workbook format.

A Trait Workbook has six sheets: Variables, Traits, Methods, Scales,
Trait Classes and Root. This module converts between those sheets, given
as lists of header -> value rows, and the record model. Reading and
writing the cells of an actual ``.xlsx`` file is done by
:class:`trait_ontology.wrappers.general.xlsx_wrapper.XLSXWrapper`.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Type

from openpyxl.utils import get_column_letter

from trait_ontology.errors import WorkbookFormatError
from trait_ontology.model.records import (
    METHOD_HEADERS,
    METHODS,
    ROOT,
    ROOT_HEADERS,
    SCALE_HEADERS,
    SCALES,
    SHEET_NAMES,
    TRAIT_CLASS_HEADERS,
    TRAIT_CLASSES,
    TRAIT_HEADERS,
    TRAITS,
    VARIABLE_HEADERS,
    VARIABLE_KEY,
    VARIABLES,
    CategoryCounter,
    Method,
    Record,
    Root,
    Scale,
    Trait,
    TraitClass,
    TraitRecords,
    Variable,
    distinct_trait_classes,
    first_by_name,
    normalize_value,
)

logger = logging.getLogger(__name__)

DUPLICATE = "duplicate"
MISMATCH = "mismatch"

DUPLICATE_CHECKED_COLUMNS = {
    VARIABLES: ("Variable ID", "Variable name", "Variable synonyms", VARIABLE_KEY),
    TRAITS: ("Trait ID", "Trait name"),
    METHODS: ("Method ID", "Method name"),
    SCALES: ("Scale ID", "Scale name"),
}


@dataclass
class Marker:
    """
    Cells of one column that an adapter should highlight.

    Row indexes are positions in :attr:`WorkbookTable.rows`, not sheet rows.
    """

    column: int
    kind: str
    values: Set[str] = field(default_factory=set)
    rows: Set[int] = field(default_factory=set)


@dataclass
class WorkbookTable:
    """The header and rows of one workbook sheet, ready to be written."""

    name: str
    headers: List[str]
    rows: List[List[Optional[str]]] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)

    def column(self, header: str) -> List[Optional[str]]:
        i = self.headers.index(header)
        return [row[i] for row in self.rows]


def _is_blank(row: Mapping[str, Any]) -> bool:
    return all(normalize_value(v) is None for v in row.values())


def _referenced(
    cls: Type[Record], rows: Iterable[Mapping], name_header: str, names: Set[str]
) -> List[Record]:
    kept = []
    for row in rows:
        name = normalize_value(row.get(name_header))
        if name is not None and name in names:
            kept.append(row)
    return [cls.from_row(row) for row in kept]


def read_workbook(
    tables: Mapping[str, List[Mapping[str, Any]]],
    counter: CategoryCounter = None,
    institution: str = None,
) -> TraitRecords:
    """
    Build a record model from the rows of the six workbook sheets.

    Only the traits, methods and scales referenced by a variable are kept.
    When an institution is given, only variables listing that institution
    are kept, and the filtering of the other sheets follows from them.

    :param tables: sheet name -> list of header -> value rows
    :param counter: accumulator for the highest category index seen
    :param institution: optional institution to filter variables by
    :return:
    """
    if counter is None:
        counter = CategoryCounter()
    missing = [name for name in SHEET_NAMES if name not in tables]
    if missing:
        raise WorkbookFormatError(f"Trait workbook is missing worksheets: {', '.join(missing)}")

    sheets = {}
    for name in SHEET_NAMES:
        logger.info(f"Parsing worksheet [{name}]")
        sheets[name] = [row for row in tables[name] if not _is_blank(row)]
        for row in sheets[name]:
            for header in row:
                if header is not None:
                    counter.observe_header(str(header))

    variables = [Variable.from_row(row) for row in sheets[VARIABLES]]
    if institution:
        variables = [v for v in variables if institution in v.institutions()]
        logger.info(f"Kept {len(variables)} variables used by [{institution}]")

    records = TraitRecords(
        root=Root.from_row(sheets[ROOT][0]) if sheets[ROOT] else None,
        variables=variables,
        traits=_referenced(Trait, sheets[TRAITS], "Trait name", {v.trait_name for v in variables}),
        methods=_referenced(
            Method, sheets[METHODS], "Method name", {v.method_name for v in variables}
        ),
        scales=_referenced(Scale, sheets[SCALES], "Scale name", {v.scale_name for v in variables}),
        trait_classes=[TraitClass.from_row(row) for row in sheets[TRAIT_CLASSES]],
        categories=counter,
    )
    if records.root is None:
        raise WorkbookFormatError("Trait workbook [Root] worksheet has no root information")
    for name, rows in records.tables().items():
        logger.info(f"Read {len(rows)} rows from [{name}]")
    return records


def _duplicate_markers(table: WorkbookTable) -> List[Marker]:
    markers = []
    for header in DUPLICATE_CHECKED_COLUMNS.get(table.name, ()):
        values = table.column(header)
        if header == VARIABLE_KEY:
            values = [
                "|".join(v or "" for v in names) if any(names) else None
                for names in zip(
                    table.column("Trait name"),
                    table.column("Method name"),
                    table.column("Scale name"),
                )
            ]
        counts = Counter(v for v in values if v)
        duplicated = {v for v, n in counts.items() if n > 1}
        if duplicated:
            markers.append(
                Marker(
                    column=table.headers.index(header),
                    kind=DUPLICATE,
                    values=duplicated,
                    rows={i for i, v in enumerate(values) if v in duplicated},
                )
            )
    return markers


def _mismatch_marker(table: WorkbookTable, header: str, known: Set[str]) -> Optional[Marker]:
    values = table.column(header)
    unknown = {v for v in values if v and v not in known}
    if not unknown:
        return None
    return Marker(
        column=table.headers.index(header),
        kind=MISMATCH,
        values=unknown,
        rows={i for i, v in enumerate(values) if v in unknown},
    )


def _distinct_rows(
    records: Sequence[Record], headers: Sequence[str], counter: CategoryCounter = None
) -> List[List[Optional[str]]]:
    """One row per distinct name, the first occurrence winning."""
    rows = []
    for record in first_by_name(records):
        row = record.to_row()
        if isinstance(record, Scale) and counter is not None:
            row = {**row, **record.category_row(counter)}
        rows.append([row.get(h) for h in headers])
    return rows


def _variables_table(records: TraitRecords) -> WorkbookTable:
    headers = list(VARIABLE_HEADERS)
    key_column = headers.index(VARIABLE_KEY)
    name_columns = [
        get_column_letter(headers.index(h) + 1) for h in ("Trait name", "Method name", "Scale name")
    ]
    table = WorkbookTable(name=VARIABLES, headers=headers)
    for i, variable in enumerate(records.variables):
        row = variable.to_row()
        if not row["Variable label"] and variable.trait_name and variable.scale_name:
            row["Variable label"] = f"{variable.trait_name} {variable.scale_name}"
        values = [row.get(h) for h in headers]
        sheet_row = i + 2
        cells = [f"{c}{sheet_row}" for c in name_columns]
        values[key_column] = f'=CONCATENATE({cells[0]}, "|", {cells[1]}, "|", {cells[2]})'
        table.rows.append(values)
    return table


def write_workbook(records: TraitRecords) -> List[WorkbookTable]:
    """
    Lay out the record model as the six workbook sheets.

    Traits, methods and scales are written once per distinct name. Trait
    classes are derived from the traits' class names when the model has
    none. Each table carries markers for duplicated values and for
    variable trait/method/scale names that match nothing.

    :param records:
    :return:
    """
    counter = records.categories
    scale_headers = [*SCALE_HEADERS, *counter.headers()]
    trait_classes = records.trait_classes or distinct_trait_classes(records.traits)

    logger.info("Writing Variables...")
    variables = _variables_table(records)
    logger.info("Writing Traits...")
    traits = WorkbookTable(TRAITS, list(TRAIT_HEADERS), _distinct_rows(records.traits, TRAIT_HEADERS))
    logger.info("Writing Methods...")
    methods = WorkbookTable(
        METHODS, list(METHOD_HEADERS), _distinct_rows(records.methods, METHOD_HEADERS)
    )
    logger.info("Writing Scales...")
    scales = WorkbookTable(SCALES, scale_headers, _distinct_rows(records.scales, scale_headers, counter))
    logger.info("Writing Trait Classes...")
    classes = WorkbookTable(
        TRAIT_CLASSES, list(TRAIT_CLASS_HEADERS), _distinct_rows(trait_classes, TRAIT_CLASS_HEADERS)
    )
    logger.info("Writing Root Info...")
    root = WorkbookTable(ROOT, list(ROOT_HEADERS))
    if records.root:
        root_row = records.root.to_row()
        root.rows.append([root_row.get(h) for h in ROOT_HEADERS])

    tables = [variables, traits, methods, scales, classes, root]
    for table in tables:
        table.markers.extend(_duplicate_markers(table))
    for header, known in (
        ("Trait name", traits.column("Trait name")),
        ("Method name", methods.column("Method name")),
        ("Scale name", scales.column("Scale name")),
    ):
        marker = _mismatch_marker(variables, header, {v for v in known if v})
        if marker:
            variables.markers.append(marker)
    for table in tables:
        logger.info(f"   Wrote {len(table.rows)} {table.name}")
    return tables
