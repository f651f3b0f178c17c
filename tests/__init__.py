"""Tests for trait-ontology."""
from pathlib import Path

this_directory = Path(__file__).resolve().parent
INPUT_DIR = this_directory / "input"
EXAMPLE_DICTIONARY = INPUT_DIR / "sugar_kelp_dictionary.txt"
