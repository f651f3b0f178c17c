"""Record model shared by the workbook, dictionary and OBO formats."""
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

logger = logging.getLogger(__name__)

MIN_CATEGORY_COUNT = 10

CATEGORY_HEADER_PATTERN = re.compile(r"^[Cc]ategory\s*(\d+)$")
INSTITUTION_SEPARATOR = re.compile(r"\s*,\s*")
TRAIT_TOKEN = re.compile(r" *\btraits?\b", re.IGNORECASE)

VARIABLES = "Variables"
TRAITS = "Traits"
METHODS = "Methods"
SCALES = "Scales"
TRAIT_CLASSES = "Trait Classes"
ROOT = "Root"

SHEET_NAMES = (VARIABLES, TRAITS, METHODS, SCALES, TRAIT_CLASSES, ROOT)

VARIABLE_KEY = "VARIABLE KEY"

VARIABLE_HEADERS = (
    "Curation",
    "Variable ID",
    "Variable name",
    "Variable synonyms",
    "Variable label",
    "Context of use",
    "Growth stage",
    "Variable status",
    "Variable Xref",
    "Institution",
    "Scientist",
    "Date",
    "Language",
    "Crop",
    "Trait name",
    "Method name",
    "Scale name",
    VARIABLE_KEY,
)

DICTIONARY_VARIABLE_HEADERS = (
    "Curation",
    "Variable ID",
    "Variable name",
    "Variable synonyms",
    "Context of use",
    "Growth stage",
    "Variable status",
    "Variable Xref",
    "Institution",
    "Scientist",
    "Date",
    "Language",
    "Crop",
)

TRAIT_HEADERS = (
    "Trait ID",
    "Trait name",
    "Trait class",
    "Trait description",
    "Trait synonyms",
    "Main trait abbreviation",
    "Alternative trait abbreviations",
    "Entity",
    "Attribute",
    "Trait status",
    "Trait Xref",
)

METHOD_HEADERS = (
    "Method ID",
    "Method name",
    "Method class",
    "Method description",
    "Formula",
    "Method reference",
)

SCALE_HEADERS = (
    "Scale ID",
    "Scale name",
    "Scale class",
    "Decimal places",
    "Lower limit",
    "Upper limit",
    "Scale Xref",
)

TRAIT_CLASS_HEADERS = ("Trait class ID", "Trait class name")

ROOT_HEADERS = ("Root ID", "Root name", "namespace")


def normalize_value(value: Any) -> Optional[str]:
    """
    Normalize a cell or field value to an optional string.

    Spreadsheet readers hand back ints, floats and dates; blank strings
    count as absent.

    :param value:
    :return:
    """
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    text = str(value)
    if not text.strip():
        return None
    return text


def local_id(value: Optional[str]) -> Optional[str]:
    """
    Strip the namespace and leading zeros from an identifier.

    >>> local_id("CO_360:0000045")
    '45'
    >>> local_id("0012")
    '12'

    :param value:
    :return:
    """
    if value is None:
        return None
    local = value.split(":", 1)[1] if ":" in value else value
    local = local.strip()
    if not local:
        return None
    return local.lstrip("0") or "0"


def category_header(index: int) -> str:
    return f"Category {index}"


def category_index(header: str) -> Optional[int]:
    """Return N for a ``Category N`` header, otherwise None."""
    m = CATEGORY_HEADER_PATTERN.match(header.strip())
    if m:
        return int(m.group(1))
    return None


def derive_class_id(name: str) -> str:
    """
    Derive a trait class id from its name.

    >>> derive_class_id("Biotic stress traits")
    'Biotic_stress'

    :param name:
    :return:
    """
    return TRAIT_TOKEN.sub("", name).strip().replace(" ", "_")


class CategoryCounter(BaseModel):
    """
    Running maximum of scale category indexes seen during a read.

    Grows only; never drops below the default of ten columns.
    """

    count: int = MIN_CATEGORY_COUNT

    def observe(self, index: int) -> None:
        if index > self.count:
            self.count = index

    def observe_header(self, header: str) -> Optional[int]:
        index = category_index(header)
        if index is not None:
            self.observe(index)
        return index

    def headers(self) -> List[str]:
        return [category_header(i) for i in range(1, self.count + 1)]


class ScaleCategory(BaseModel):
    """A single ``key=label`` category definition of a scale."""

    position: int
    """Ordinal position, i.e. N in ``Category N``"""

    value: str

    @property
    def key(self) -> str:
        return self.value.split("=", 1)[0].strip()

    @property
    def label(self) -> str:
        if "=" not in self.value:
            return self.value.strip()
        return self.value.split("=", 1)[1].strip()


class Record(BaseModel):
    """
    A row of one of the workbook tables.

    Fields are aliased to their column headers, so a record can be built
    from, and dumped to, a header -> value mapping.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=(), extra="ignore")

    table: ClassVar[str] = None
    headers: ClassVar[Tuple[str, ...]] = ()
    id_fields: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if isinstance(value, list):
            return value
        return normalize_value(value)

    @model_validator(mode="after")
    def _strip_ids(self):
        for id_field in self.id_fields:
            setattr(self, id_field, local_id(getattr(self, id_field)))
        return self

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        return cls.model_validate({str(k): v for k, v in row.items() if k is not None})

    def to_row(self) -> Dict[str, Optional[str]]:
        dumped = self.model_dump(by_alias=True)
        return {h: dumped.get(h) for h in self.headers}


class Variable(Record):
    table: ClassVar[str] = VARIABLES
    headers: ClassVar[Tuple[str, ...]] = VARIABLE_HEADERS
    id_fields: ClassVar[Tuple[str, ...]] = ("variable_id",)

    curation: Optional[str] = Field(None, alias="Curation")
    variable_id: Optional[str] = Field(None, alias="Variable ID")
    name: Optional[str] = Field(None, alias="Variable name")
    synonyms: Optional[str] = Field(None, alias="Variable synonyms")
    label: Optional[str] = Field(None, alias="Variable label")
    context_of_use: Optional[str] = Field(None, alias="Context of use")
    growth_stage: Optional[str] = Field(None, alias="Growth stage")
    status: Optional[str] = Field(None, alias="Variable status")
    xref: Optional[str] = Field(None, alias="Variable Xref")
    institution: Optional[str] = Field(None, alias="Institution")
    scientist: Optional[str] = Field(None, alias="Scientist")
    date: Optional[str] = Field(None, alias="Date")
    language: Optional[str] = Field(None, alias="Language")
    crop: Optional[str] = Field(None, alias="Crop")
    trait_name: Optional[str] = Field(None, alias="Trait name")
    method_name: Optional[str] = Field(None, alias="Method name")
    scale_name: Optional[str] = Field(None, alias="Scale name")

    @property
    def variable_key(self) -> Optional[str]:
        names = (self.trait_name, self.method_name, self.scale_name)
        if not any(names):
            return None
        return "|".join(n or "" for n in names)

    def institutions(self) -> List[str]:
        if not self.institution:
            return []
        return INSTITUTION_SEPARATOR.split(self.institution.strip())

    def to_row(self) -> Dict[str, Optional[str]]:
        row = super().to_row()
        row[VARIABLE_KEY] = self.variable_key
        return row


class Trait(Record):
    table: ClassVar[str] = TRAITS
    headers: ClassVar[Tuple[str, ...]] = TRAIT_HEADERS
    id_fields: ClassVar[Tuple[str, ...]] = ("trait_id",)

    trait_id: Optional[str] = Field(None, alias="Trait ID")
    name: Optional[str] = Field(None, alias="Trait name")
    trait_class: Optional[str] = Field(None, alias="Trait class")
    description: Optional[str] = Field(None, alias="Trait description")
    synonyms: Optional[str] = Field(None, alias="Trait synonyms")
    main_abbreviation: Optional[str] = Field(None, alias="Main trait abbreviation")
    alternative_abbreviations: Optional[str] = Field(None, alias="Alternative trait abbreviations")
    entity: Optional[str] = Field(None, alias="Entity")
    attribute: Optional[str] = Field(None, alias="Attribute")
    status: Optional[str] = Field(None, alias="Trait status")
    xref: Optional[str] = Field(None, alias="Trait Xref")


class Method(Record):
    table: ClassVar[str] = METHODS
    headers: ClassVar[Tuple[str, ...]] = METHOD_HEADERS
    id_fields: ClassVar[Tuple[str, ...]] = ("method_id",)

    method_id: Optional[str] = Field(None, alias="Method ID")
    name: Optional[str] = Field(None, alias="Method name")
    method_class: Optional[str] = Field(None, alias="Method class")
    description: Optional[str] = Field(None, alias="Method description")
    formula: Optional[str] = Field(None, alias="Formula")
    reference: Optional[str] = Field(None, alias="Method reference")


class Scale(Record):
    table: ClassVar[str] = SCALES
    headers: ClassVar[Tuple[str, ...]] = SCALE_HEADERS
    id_fields: ClassVar[Tuple[str, ...]] = ("scale_id",)

    scale_id: Optional[str] = Field(None, alias="Scale ID")
    name: Optional[str] = Field(None, alias="Scale name")
    scale_class: Optional[str] = Field(None, alias="Scale class")
    decimal_places: Optional[str] = Field(None, alias="Decimal places")
    lower_limit: Optional[str] = Field(None, alias="Lower limit")
    upper_limit: Optional[str] = Field(None, alias="Upper limit")
    xref: Optional[str] = Field(None, alias="Scale Xref")
    categories: List[Optional[str]] = Field(default_factory=list)
    """Category values by position; index 0 holds ``Category 1``, gaps are None"""

    @model_validator(mode="before")
    @classmethod
    def _collect_categories(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "categories" in data:
            return data
        by_index = {}
        for key, value in data.items():
            index = category_index(key)
            if index is None or index < 1:
                continue
            value = normalize_value(value)
            if value is not None:
                by_index[index] = value
        categories = [None] * max(by_index, default=0)
        for index, value in by_index.items():
            categories[index - 1] = value
        return {**data, "categories": categories}

    def category_list(self) -> List[ScaleCategory]:
        return [
            ScaleCategory(position=i, value=v)
            for i, v in enumerate(self.categories, start=1)
            if v is not None
        ]

    def category_row(self, counter: CategoryCounter) -> Dict[str, Optional[str]]:
        row = {}
        for i, header in enumerate(counter.headers(), start=1):
            row[header] = self.categories[i - 1] if i <= len(self.categories) else None
        return row


class TraitClass(Record):
    table: ClassVar[str] = TRAIT_CLASSES
    headers: ClassVar[Tuple[str, ...]] = TRAIT_CLASS_HEADERS

    class_id: Optional[str] = Field(None, alias="Trait class ID")
    name: Optional[str] = Field(None, alias="Trait class name")

    @model_validator(mode="after")
    def _derive_id(self):
        if not self.class_id and self.name:
            self.class_id = derive_class_id(self.name)
        return self


class Root(Record):
    table: ClassVar[str] = ROOT
    headers: ClassVar[Tuple[str, ...]] = ROOT_HEADERS

    root_id: Optional[str] = Field(None, alias="Root ID")
    name: Optional[str] = Field(None, alias="Root name")
    namespace: Optional[str] = Field(None, alias="namespace")


R = TypeVar("R", bound=Record)


class NameIndex(Generic[R]):
    """
    Lookup of the records of one table by name.

    The first record with a given name wins; later records sharing the
    name are kept in ``conflicts`` and reported.
    """

    def __init__(self, table: str, records: Iterable[R]):
        self.table = table
        self.conflicts: List[R] = []
        self._by_name: Dict[str, R] = {}
        for record in records:
            name = record.name
            if not name:
                continue
            if name in self._by_name:
                logger.warning(
                    f"Name [{name}] is used by more than one row in [{table}]; "
                    "keeping the first occurrence"
                )
                self.conflicts.append(record)
                continue
            self._by_name[name] = record

    def get(self, name: Optional[str]) -> Optional[R]:
        if name is None:
            return None
        return self._by_name.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)


@dataclass
class Mismatch:
    """A variable whose trait, method or scale name does not resolve."""

    variable: str
    column: str
    value: Optional[str]

    def __str__(self) -> str:
        return f"could not match variable [{self.variable}] with '{self.column}' [{self.value}]"


@dataclass
class ResolvedVariable:
    variable: Variable
    trait: Trait
    method: Method
    scale: Scale


@dataclass
class Resolution:
    resolved: List[ResolvedVariable] = field(default_factory=list)
    mismatches: List[Mismatch] = field(default_factory=list)


def first_by_name(records: Iterable[R]) -> List[R]:
    """Records in order, skipping any whose name was already seen; unnamed records are kept."""
    seen = set()
    kept = []
    for record in records:
        if record.name is not None:
            if record.name in seen:
                continue
            seen.add(record.name)
        kept.append(record)
    return kept


def distinct_trait_classes(traits: Iterable[Trait]) -> List[TraitClass]:
    """Trait classes for the distinct class names used by traits, in first-seen order."""
    names = []
    for trait in traits:
        if trait.trait_class and trait.trait_class not in names:
            names.append(trait.trait_class)
    return [TraitClass(name=n) for n in names]


class TraitRecords(BaseModel):
    """
    All tables of one trait ontology.

    Built once per conversion and treated as read-only afterwards; name
    indexes are computed lazily and cached.
    """

    model_config = ConfigDict(protected_namespaces=())

    root: Optional[Root] = None
    variables: List[Variable] = Field(default_factory=list)
    traits: List[Trait] = Field(default_factory=list)
    methods: List[Method] = Field(default_factory=list)
    scales: List[Scale] = Field(default_factory=list)
    trait_classes: List[TraitClass] = Field(default_factory=list)
    categories: CategoryCounter = Field(default_factory=CategoryCounter)

    _indexes: Dict[str, NameIndex] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _count_scale_categories(self):
        for scale in self.scales:
            self.categories.observe(len(scale.categories))
        return self

    def _index(self, table: str, records: List[R]) -> NameIndex[R]:
        if table not in self._indexes:
            self._indexes[table] = NameIndex(table, records)
        return self._indexes[table]

    @property
    def trait_index(self) -> NameIndex[Trait]:
        return self._index(TRAITS, self.traits)

    @property
    def method_index(self) -> NameIndex[Method]:
        return self._index(METHODS, self.methods)

    @property
    def scale_index(self) -> NameIndex[Scale]:
        return self._index(SCALES, self.scales)

    @property
    def trait_class_index(self) -> NameIndex[TraitClass]:
        return self._index(TRAIT_CLASSES, self.trait_classes)

    @property
    def root_id(self) -> Optional[str]:
        return self.root.root_id if self.root else None

    def tables(self) -> Dict[str, List[Record]]:
        """Records of every table, keyed and ordered by sheet name."""
        return {
            VARIABLES: list(self.variables),
            TRAITS: list(self.traits),
            METHODS: list(self.methods),
            SCALES: list(self.scales),
            TRAIT_CLASSES: list(self.trait_classes),
            ROOT: [self.root] if self.root else [],
        }

    def all_trait_classes(self) -> List[TraitClass]:
        """
        Listed trait classes, one per name, followed by derived classes for
        the class names of traits that are not listed.

        :return:
        """
        listed = first_by_name(self.trait_classes)
        unlisted = [t for t in self.traits if t.trait_class not in self.trait_class_index]
        return listed + distinct_trait_classes(unlisted)

    def class_id_for(self, trait: Trait) -> Optional[str]:
        """Id of the trait's class, derived from the class name if the class is not listed."""
        trait_class = self.trait_class_index.get(trait.trait_class)
        if trait_class:
            return trait_class.class_id
        if trait.trait_class:
            return derive_class_id(trait.trait_class)
        return None

    def resolve(self) -> Resolution:
        """
        Join every variable to its trait, method and scale by name.

        Variables with a name that does not resolve are reported and left
        out of the resolved list.

        :return:
        """
        resolution = Resolution()
        for variable in self.variables:
            trait = self.trait_index.get(variable.trait_name)
            method = self.method_index.get(variable.method_name)
            scale = self.scale_index.get(variable.scale_name)
            misses = [
                Mismatch(variable=variable.name, column=column, value=value)
                for column, value, match in (
                    ("Trait name", variable.trait_name, trait),
                    ("Method name", variable.method_name, method),
                    ("Scale name", variable.scale_name, scale),
                )
                if match is None
            ]
            for miss in misses:
                logger.error(str(miss))
            if misses:
                resolution.mismatches.extend(misses)
            else:
                resolution.resolved.append(ResolvedVariable(variable, trait, method, scale))
        return resolution
