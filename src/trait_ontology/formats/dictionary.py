"""
Crop Ontology Trait Dictionary format.

A Trait Dictionary is a semicolon separated, double quoted text file with
one row per variable. The first row names the columns; columns past the
named ones hold extra scale categories.

Rows are split on the literal ``";`` sequence rather than parsed as CSV, so
values that contain that sequence (or a newline, a leading semicolon, or a
trailing quote or semicolon) cannot be read back and are refused when writing.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Type

from trait_ontology.errors import DictionaryFormatError
from trait_ontology.formats.format_utils import generate_id
from trait_ontology.model.records import (
    DICTIONARY_VARIABLE_HEADERS,
    METHOD_HEADERS,
    SCALE_HEADERS,
    TRAIT_HEADERS,
    CategoryCounter,
    Method,
    Record,
    Resolution,
    Root,
    Scale,
    Trait,
    TraitRecords,
    Variable,
    category_header,
    category_index,
    distinct_trait_classes,
    normalize_value,
)

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = '";'

ROW = Dict[str, str]


def _split_line(line: str) -> List[Optional[str]]:
    values = []
    for part in line.replace("\r", "").split(FIELD_SEPARATOR):
        if part.startswith('"'):
            part = part[1:]
        if part.endswith(";"):
            part = part[:-1]
        if part.endswith('"'):
            part = part[:-1]
        values.append(part if part and part != '"' else None)
    return values


def parse_dictionary(text: str, counter: CategoryCounter = None) -> List[ROW]:
    """
    Parse Trait Dictionary text into one header -> value mapping per row.

    Empty values are left out of the row mappings. Values beyond the
    declared header become ``Category N`` entries, numbered after the
    highest category named in the header.

    :param text: contents of a trait dictionary
    :param counter: accumulator for the highest category index seen
    :return:
    """
    if counter is None:
        counter = CategoryCounter()
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return []
    headers = {i: h for i, h in enumerate(_split_line(lines[0])) if h is not None}
    first_extra = max((category_index(h) or 0 for h in headers.values()), default=0) + 1
    rows = []
    for line in lines[1:]:
        row = {}
        extra = first_extra
        for i, value in enumerate(_split_line(line)):
            if value is None:
                continue
            header = headers.get(i)
            if header is None:
                header = category_header(extra)
                extra += 1
            row[header] = value
            counter.observe_header(header)
        rows.append(row)
    logger.info(f"Parsed {len(rows)} trait dictionary rows")
    return rows


def dictionary_headers(counter: CategoryCounter) -> List[str]:
    """All Trait Dictionary columns, in order."""
    return [
        *DICTIONARY_VARIABLE_HEADERS,
        *TRAIT_HEADERS,
        *METHOD_HEADERS,
        *SCALE_HEADERS,
        *counter.headers(),
    ]


def _quote(column: str, value: Optional[str]) -> str:
    if value is None:
        return '""'
    value = str(value)
    if (
        "\n" in value
        or "\r" in value
        or FIELD_SEPARATOR in value
        or value.endswith('"')
        or value.endswith(";")
        or value.startswith(";")
    ):
        raise DictionaryFormatError(
            f"Value of column [{column}] cannot be written to a trait dictionary: {value!r}"
        )
    return f'"{value}"'


def serialize_dictionary(headers: Sequence[str], rows: Iterable[Mapping[str, Optional[str]]]) -> str:
    """
    Serialize rows as Trait Dictionary text.

    Every row has every column; missing values are written as ``""``.

    :param headers: column names, in output order
    :param rows:
    :return:
    """
    lines = [";".join(_quote(h, h) for h in headers)]
    for row in rows:
        lines.append(";".join(_quote(h, row.get(h)) for h in headers))
    return "".join(f"{line}\n" for line in lines)


def build_dictionary_rows(records: TraitRecords, resolution: Resolution = None) -> List[ROW]:
    """
    Flatten the record model into one dictionary row per resolved variable.

    Variables whose trait, method or scale cannot be matched are skipped
    (and reported when the model is resolved).

    :param records:
    :param resolution: a previous result of ``records.resolve()``, if any
    :return:
    """
    if resolution is None:
        resolution = records.resolve()
    root_id = records.root_id
    rows = []
    for rv in resolution.resolved:
        variable_row = rv.variable.to_row()
        row = {h: variable_row.get(h) for h in DICTIONARY_VARIABLE_HEADERS}
        row.update(rv.trait.to_row())
        row.update(rv.method.to_row())
        row.update(rv.scale.to_row())
        row.update(rv.scale.category_row(records.categories))
        row["Variable ID"] = generate_id(root_id, rv.variable.variable_id)
        row["Trait ID"] = generate_id(root_id, rv.trait.trait_id)
        row["Method ID"] = generate_id(root_id, rv.method.method_id)
        row["Scale ID"] = generate_id(root_id, rv.scale.scale_id)
        rows.append(row)
    logger.info(f"Created {len(rows)} variables")
    return rows


def _distinct(cls: Type[Record], rows: Iterable[Mapping], name_header: str) -> List[Record]:
    seen = set()
    records = []
    for row in rows:
        name = normalize_value(row.get(name_header))
        if name is None or name in seen:
            continue
        seen.add(name)
        records.append(cls.from_row(row))
    return records


def records_from_dictionary(
    rows: Iterable[Mapping], root: Root, counter: CategoryCounter = None
) -> TraitRecords:
    """
    Build a record model from parsed Trait Dictionary rows.

    Each row is a variable; traits, methods and scales are deduplicated by
    name with the first row winning. Trait classes come from the distinct
    class names of the traits.

    :param rows: output of :func:`parse_dictionary`
    :param root: root information of the ontology
    :param counter: the accumulator used while parsing
    :return:
    """
    rows = list(rows)
    traits = _distinct(Trait, rows, "Trait name")
    return TraitRecords(
        root=root,
        variables=[Variable.from_row(row) for row in rows],
        traits=traits,
        methods=_distinct(Method, rows, "Method name"),
        scales=_distinct(Scale, rows, "Scale name"),
        trait_classes=distinct_trait_classes(traits),
        categories=counter if counter is not None else CategoryCounter(),
    )
