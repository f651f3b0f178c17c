from typing import Dict, List

import pytest
from click.testing import CliRunner

from tests import EXAMPLE_DICTIONARY
from trait_ontology.formats.dictionary import parse_dictionary, records_from_dictionary
from trait_ontology.model import CategoryCounter, Method, Root, Scale, Trait, TraitClass, TraitRecords, Variable


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def root() -> Root:
    return Root(root_id="CO_360", name="Sugar Kelp Traits", namespace="sugar_kelp")


@pytest.fixture
def dictionary_text() -> str:
    return EXAMPLE_DICTIONARY.read_text()


@pytest.fixture
def dictionary_records(dictionary_text, root) -> TraitRecords:
    counter = CategoryCounter()
    rows = parse_dictionary(dictionary_text, counter)
    return records_from_dictionary(rows, root, counter)


@pytest.fixture
def height_records(root) -> TraitRecords:
    """One variable measuring Height with the Visual method on a cm scale."""
    return TraitRecords(
        root=root,
        variables=[
            Variable(
                variable_id="45",
                name="PH_cm",
                synonyms="Plant height, PH",
                trait_name="Height",
                method_name="Visual",
                scale_name="cm",
            )
        ],
        traits=[
            Trait(
                trait_id="10",
                name="Height",
                trait_class="Morphological trait",
                description="Height of the blade",
                main_abbreviation="PH",
            )
        ],
        methods=[
            Method(method_id="20", name="Visual", method_class="Measurement", description="Measured by eye")
        ],
        scales=[Scale(scale_id="30", name="cm", scale_class="Numerical")],
        trait_classes=[TraitClass(name="Morphological trait")],
    )


@pytest.fixture
def workbook_tables() -> Dict[str, List[Dict]]:
    """Sheet rows as read from a trait workbook file."""
    return {
        "Variables": [
            {
                "Variable ID": 45,
                "Variable name": "PH_cm",
                "Institution": "Cornell, USDA",
                "Trait name": "Height",
                "Method name": "Visual",
                "Scale name": "cm",
                "VARIABLE KEY": None,
            },
            {
                "Variable ID": 46,
                "Variable name": "BC_1to3",
                "Institution": "USDA",
                "Trait name": "Blade color",
                "Method name": "Visual",
                "Scale name": "1-3 color scale",
                "VARIABLE KEY": None,
            },
            {"Variable ID": None, "Variable name": None, "Institution": None},
        ],
        "Traits": [
            {"Trait ID": 10, "Trait name": "Height", "Trait class": "Morphological trait"},
            {"Trait ID": 11, "Trait name": "Blade color", "Trait class": "Morphological trait"},
            {"Trait ID": 12, "Trait name": "Unused", "Trait class": "Morphological trait"},
        ],
        "Methods": [
            {"Method ID": 20, "Method name": "Visual", "Method class": "Measurement"},
        ],
        "Scales": [
            {"Scale ID": 30, "Scale name": "cm", "Scale class": "Numerical"},
            {
                "Scale ID": 31,
                "Scale name": "1-3 color scale",
                "Scale class": "Ordinal",
                "Category 1": "1=Light",
                "Category 2": "2=Medium",
                "Category 12": "12=Black",
            },
        ],
        "Trait Classes": [
            {"Trait class ID": "Morphological", "Trait class name": "Morphological trait"},
        ],
        "Root": [{"Root ID": "CO_360", "Root name": "Sugar Kelp Traits", "namespace": "sugar_kelp"}],
    }
