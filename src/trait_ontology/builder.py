"""
Conversion pipelines behind the command line.

* :func:`create_workbook`: trait dictionary (file or download) -> trait workbook
* :func:`run_build`: trait workbook -> trait dictionary and/or OBO file
* :func:`convert_obo`: OBO file -> OBO file with merged namespaces
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from trait_ontology.config import BuildConfiguration, ConvertConfiguration, WorkbookConfiguration
from trait_ontology.formats.dictionary import (
    build_dictionary_rows,
    dictionary_headers,
    records_from_dictionary,
    serialize_dictionary,
)
from trait_ontology.formats.obo import rewrite_namespaces, write_obo
from trait_ontology.formats.workbook import read_workbook, write_workbook
from trait_ontology.model.records import CategoryCounter, Mismatch, TraitRecords
from trait_ontology.validation import validate_records
from trait_ontology.wrappers import get_wrapper

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Everything a build produced, before it is written out."""

    records: TraitRecords
    mismatches: List[Mismatch] = field(default_factory=list)
    dictionary: Optional[str] = None
    obo: Optional[str] = None


def load_workbook_records(path: Union[str, Path], institution: str = None) -> TraitRecords:
    """
    Read a trait workbook file into a record model.

    :param path: xlsx file
    :param institution: optional institution to filter variables by
    :return:
    """
    wrapper = get_wrapper("xlsx", source_locator=path)
    return read_workbook(wrapper.read_tables(), CategoryCounter(), institution=institution)


def build(
    records: TraitRecords, config: BuildConfiguration, now: datetime = None
) -> BuildResult:
    """
    Validate a record model and serialize it to the requested formats.

    Nothing is written here, so a failed check leaves no output behind.

    :param records:
    :param config:
    :param now: generation time for the OBO header
    :return:
    """
    validate_records(records, force=config.force)
    resolution = records.resolve()
    result = BuildResult(records=records, mismatches=resolution.mismatches)
    if config.dictionary_output:
        logger.info("Building Trait Dictionary")
        rows = build_dictionary_rows(records, resolution)
        result.dictionary = serialize_dictionary(dictionary_headers(records.categories), rows)
    if config.obo_output:
        logger.info("Building OBO File")
        result.obo = write_obo(
            records,
            config.username,
            source=str(config.workbook),
            now=now,
            resolution=resolution,
        )
    return result


def write_outputs(result: BuildResult, config: BuildConfiguration) -> None:
    if result.dictionary is not None:
        logger.info(f"Writing Trait Dictionary [{config.dictionary_output}]")
        with open(config.dictionary_output, "w", encoding="utf-8") as f:
            f.write(result.dictionary)
    if result.obo is not None:
        logger.info(f"Writing OBO File [{config.obo_output}]")
        with open(config.obo_output, "w", encoding="utf-8") as f:
            f.write(result.obo)


def run_build(config: BuildConfiguration, now: datetime = None) -> BuildResult:
    """
    Build a trait dictionary and/or OBO file from a trait workbook.

    :param config:
    :param now: generation time for the OBO header
    :return:
    """
    records = load_workbook_records(config.workbook, institution=config.institution)
    result = build(records, config, now=now)
    write_outputs(result, config)
    return result


def create_workbook(config: WorkbookConfiguration, use_cache: bool = False) -> TraitRecords:
    """
    Create a trait workbook from a trait dictionary.

    :param config:
    :param use_cache: cache downloads of the dictionary
    :return: the record model that was written
    """
    source = get_wrapper("cropontology", source_locator=config.input)
    if use_cache:
        source.set_cache()
    rows = list(source.objects())
    records = records_from_dictionary(rows, config.root(), source.counter)
    get_wrapper("xlsx", source_locator=config.output).write_tables(write_workbook(records))
    return records


def convert_obo(config: ConvertConfiguration, now: datetime = None) -> str:
    """
    Convert a standard OBO file into one with a single default namespace.

    :param config:
    :param now: conversion time for the header
    :return: the converted text
    """
    wrapper = get_wrapper("oboformat", source_locator=config.input)
    contents = rewrite_namespaces(
        wrapper.read_text(),
        config.default_namespace,
        config.namespaces,
        source=str(config.input),
        now=now,
    )
    logger.info(f"Writing SGN-OBO file [{config.output}]...")
    wrapper.write_text(contents, config.output)
    return contents
