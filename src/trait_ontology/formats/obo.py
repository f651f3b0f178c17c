"""
OBO format output for trait ontologies.

Terms are built as :class:`Stanza` objects mapping each tag to an ordered
list of values, and are written in a fixed tag order.
"""
import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from trait_ontology import PROGRAM_NAME, __version__
from trait_ontology.formats.format_utils import generate_id, obo_timestamp, split_list
from trait_ontology.model.records import Resolution, TraitRecords, first_by_name

logger = logging.getLogger(__name__)

OBO_FORMAT_VERSION = "1.2"

TERM = "Term"
TYPEDEF = "Typedef"

TERM_TAGS = (
    "id",
    "is_anonymous",
    "name",
    "namespace",
    "alt_id",
    "def",
    "comment",
    "subset",
    "synonym",
    "xref",
    "is_a",
    "intersection_of",
    "union_of",
    "disjoint_from",
    "relationship",
    "is_obsolete",
    "replaced_by",
    "consider",
    "created_by",
    "creation_date",
)

TYPEDEF_TAGS = ("id", "name", "is_transitive")

NUMBERED_TAG = re.compile(r"^(relationship|synonym|is_a)\d+$")
TAG_VALUE = re.compile(r"^([^:\s]+):\s?(.*)$")
HEADER_END = re.compile(r"\r?\n\r?\n")

METHOD_OF = "method_of"
SCALE_OF = "scale_of"
VARIABLE_OF = "variable_of"


@dataclass
class Stanza:
    """
    A ``[Term]`` or ``[Typedef]`` block.

    Repeated tags (several synonyms, several relationships) are kept as a
    list of values per tag.
    """

    stanza_type: str = TERM
    tags: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def tag_order(self) -> Tuple[str, ...]:
        return TYPEDEF_TAGS if self.stanza_type == TYPEDEF else TERM_TAGS

    def add(self, tag: str, value: Optional[str]) -> "Stanza":
        """
        Append a value to a tag; None values are ignored.

        Numbered tags such as ``relationship2`` are stored under the bare tag.

        :param tag:
        :param value:
        :return:
        """
        if value is None:
            return self
        m = NUMBERED_TAG.match(tag)
        if m:
            tag = m.group(1)
        if tag not in self.tag_order:
            raise ValueError(f"Tag [{tag}] is not allowed in a [{self.stanza_type}] stanza")
        self.tags.setdefault(tag, []).append(value)
        return self

    def add_unique(self, tag: str, value: Optional[str]) -> "Stanza":
        if value not in self.tags.get(tag, []):
            self.add(tag, value)
        return self

    def get(self, tag: str) -> List[str]:
        return self.tags.get(tag, [])

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Optional[str]], stanza_type: str = TERM) -> "Stanza":
        stanza = cls(stanza_type=stanza_type)
        for tag, value in mapping.items():
            stanza.add(tag, value)
        return stanza

    def lines(self) -> List[str]:
        return [f"{tag}: {value}" for tag in self.tag_order for value in self.tags.get(tag, [])]

    def __str__(self) -> str:
        return "".join(f"{line}\n" for line in [f"[{self.stanza_type}]", *self.lines()])


def _definition(text: Optional[str], xref: Optional[str] = None) -> str:
    return f'"{text or ""}" [{xref or ""}]'


def _synonym(text: str) -> str:
    return f'"{text}" EXACT []'


def header_lines(
    records: TraitRecords, username: str, source: str = None, now: datetime = None
) -> List[str]:
    return [
        f"format-version: {OBO_FORMAT_VERSION}",
        f"date: {obo_timestamp(now)}",
        f"saved-by: {username}",
        f"auto-generated-by: {PROGRAM_NAME}/{__version__}",
        f"remark: This file was auto-generated from a 'Trait Workbook' [{source}]",
        f"default-namespace: {records.root.namespace}",
        f"ontology: {records.root_id}",
    ]


def typedef(name: str, transitive: bool) -> Stanza:
    stanza = Stanza(TYPEDEF).add("id", name).add("name", name)
    if transitive:
        stanza.add("is_transitive", "true")
    return stanza


def obo_stanzas(records: TraitRecords, resolution: Resolution = None) -> Iterator[Stanza]:
    """
    Yield every stanza of the OBO file for a record model.

    Only resolved variables contribute variable terms and the
    method -> trait and scale -> method relationships.

    :param records:
    :param resolution: a previous result of ``records.resolve()``, if any
    :return:
    """
    if resolution is None:
        resolution = records.resolve()
    root_id = records.root_id
    namespace = records.root.namespace
    root_term = f"{root_id}:ROOT"

    def _id(local_id: Optional[str]) -> Optional[str]:
        return generate_id(root_id, local_id)

    yield typedef(METHOD_OF, True)
    yield typedef(SCALE_OF, True)
    yield typedef(VARIABLE_OF, False)

    yield Stanza().add("id", root_term).add("name", records.root.name).add("namespace", namespace)

    traits_by_method = defaultdict(list)
    methods_by_scale = defaultdict(list)
    for rv in resolution.resolved:
        traits_by_method[rv.method.name].append(rv.trait)
        methods_by_scale[rv.scale.name].append(rv.method)

    trait_classes = records.all_trait_classes()
    logger.info(f"Adding {len(trait_classes)} trait classes")
    for trait_class in trait_classes:
        stanza = Stanza().add("id", f"{root_id}:{trait_class.class_id}")
        stanza.add("name", trait_class.name).add("namespace", namespace).add("is_a", root_term)
        yield stanza

    logger.info(f"Adding {len(records.traits)} traits")
    for trait in first_by_name(records.traits):
        stanza = Stanza().add("id", _id(trait.trait_id)).add("name", trait.name)
        stanza.add("namespace", f"{namespace}_trait")
        stanza.add("def", _definition(trait.description, trait.xref))
        if trait.main_abbreviation:
            stanza.add("synonym", _synonym(trait.main_abbreviation))
        for synonym in split_list(trait.synonyms):
            stanza.add("synonym", _synonym(synonym))
        class_id = records.class_id_for(trait)
        if class_id:
            stanza.add("is_a", f"{root_id}:{class_id}")
        yield stanza

    logger.info(f"Adding {len(records.methods)} methods")
    for method in first_by_name(records.methods):
        stanza = Stanza().add("id", _id(method.method_id)).add("name", method.name)
        stanza.add("namespace", f"{namespace}_method")
        stanza.add("def", _definition(method.description, method.reference))
        for trait in traits_by_method[method.name]:
            if trait.trait_id:
                stanza.add_unique("relationship", f"{METHOD_OF} {_id(trait.trait_id)}")
        yield stanza

    logger.info(f"Adding {len(records.scales)} scales")
    for scale in first_by_name(records.scales):
        scale_id = _id(scale.scale_id)
        categories = scale.category_list()
        stanza = Stanza().add("id", scale_id).add("name", scale.name)
        stanza.add("namespace", f"{namespace}_scale")
        if categories:
            stanza.add("def", f'"{", ".join(c.value for c in categories)}" []')
        for scale_method in methods_by_scale[scale.name]:
            if scale_method.method_id:
                stanza.add_unique("relationship", f"{SCALE_OF} {_id(scale_method.method_id)}")
        yield stanza
        for category in categories:
            yield (
                Stanza()
                .add("id", f"{scale_id}/{category.position}")
                .add("name", category.label)
                .add("namespace", f"{namespace}_scale")
                .add("synonym", _synonym(category.key))
                .add("is_a", scale_id)
            )

    logger.info(f"Adding {len(resolution.resolved)} variables")
    for rv in resolution.resolved:
        variable = rv.variable
        description = ""
        if rv.method.description and variable.scale_name:
            description = f"{rv.method.description} ({variable.scale_name})"
        stanza = Stanza().add("id", _id(variable.variable_id))
        stanza.add("name", variable.label or variable.name)
        stanza.add("namespace", f"{namespace}_variable")
        stanza.add("def", _definition(description, variable.xref))
        for synonym in split_list(variable.synonyms):
            stanza.add("synonym", _synonym(synonym))
        for target in (rv.trait.trait_id, rv.method.method_id, rv.scale.scale_id):
            if target:
                stanza.add("relationship", f"{VARIABLE_OF} {_id(target)}")
        yield stanza


def write_obo(
    records: TraitRecords,
    username: str,
    source: str = None,
    now: datetime = None,
    resolution: Resolution = None,
) -> str:
    """
    Serialize a record model as OBO text.

    :param records:
    :param username: written as ``saved-by``
    :param source: name of the workbook the model was read from, for the remark
    :param now: generation time, defaults to the current time
    :param resolution: a previous result of ``records.resolve()``, if any
    :return:
    """
    if records.root is None:
        raise ValueError("Cannot write an OBO file without root information")
    contents = "".join(f"{line}\n" for line in header_lines(records, username, source, now))
    for stanza in obo_stanzas(records, resolution):
        contents += f"\n{stanza}"
    return contents


def parse_stanzas(contents: str) -> List[Stanza]:
    """
    Parse the stanzas of OBO text, skipping the header.

    Tags are not checked against the allow-lists, so any OBO file can be read.

    :param contents:
    :return:
    """
    stanzas = []
    current = None
    for line in contents.splitlines():
        line = line.strip()
        if line.startswith("[") and line.endswith("]"):
            current = Stanza(stanza_type=line[1:-1])
            stanzas.append(current)
            continue
        if current is None or not line or line.startswith("!"):
            continue
        m = TAG_VALUE.match(line)
        if m:
            current.tags.setdefault(m.group(1), []).append(m.group(2))
    return stanzas


def update_header_key(contents: str, key: str, value: str) -> str:
    """
    Set a header tag, replacing its line or adding it at the end of the header.

    :param contents: OBO text
    :param key:
    :param value:
    :return:
    """
    m = HEADER_END.search(contents)
    end = m.start() if m else len(contents)
    head, body = contents[:end], contents[end:]
    newline = "\r\n" if "\r\n" in contents else "\n"
    line = f"{key}: {value}"
    pattern = re.compile(rf"^{re.escape(key)}:[^\r\n]*", re.MULTILINE)
    if pattern.search(head):
        head = pattern.sub(lambda _: line, head, count=1)
    else:
        stripped = head.rstrip("\r\n")
        trailing = head[len(stripped) :]
        head = f"{stripped}{newline}{line}{trailing}" if stripped else f"{line}{trailing}"
    return head + body


def rewrite_namespaces(
    contents: str,
    default_namespace: str,
    namespaces: Iterable[str],
    source: str = None,
    now: datetime = None,
) -> str:
    """
    Merge the given namespaces of an OBO file into a single default namespace.

    The header's date, generator, remark and default namespace are updated.
    ``namespace:`` lines naming other namespaces are left as they are.

    :param contents: OBO text
    :param default_namespace: target namespace
    :param namespaces: namespaces to rename to the target
    :param source: name of the input file, for the remark
    :param now: conversion time, defaults to the current time
    :return:
    """
    contents = update_header_key(contents, "date", obo_timestamp(now))
    contents = update_header_key(contents, "auto-generated-by", f"{PROGRAM_NAME}/{__version__}")
    contents = update_header_key(
        contents,
        "remark",
        f"This file was converted to an SGN-compatible obo file from a standard obo file [{source}]",
    )
    contents = update_header_key(contents, "default-namespace", default_namespace)
    for namespace in namespaces:
        pattern = re.compile(rf"^namespace:[ ]*{re.escape(namespace)}[ \t]*(\r?)$", re.MULTILINE)
        contents, n = pattern.subn(lambda m: f"namespace: {default_namespace}{m.group(1)}", contents)
        logger.info(f"Converted {n} [{namespace}] namespace declarations to [{default_namespace}]")
    return contents
