from datetime import datetime

import pytest

from tests import EXAMPLE_DICTIONARY
from trait_ontology import __version__
from trait_ontology.formats.dictionary import parse_dictionary, records_from_dictionary
from trait_ontology.formats.format_utils import generate_id, obo_timestamp, split_list
from trait_ontology.formats.obo import Stanza, parse_stanzas, rewrite_namespaces, update_header_key, write_obo
from trait_ontology.model import Method, Scale, Trait, Variable

NOW = datetime(2020, 1, 2, 3, 4)

STANDARD_OBO = """format-version: 1.2
date: 01:01:2019 00:00
default-namespace: foo
ontology: CO_999

[Term]
id: CO_999:0000001
name: Height
namespace: foo_trait

[Term]
id: CO_999:0000002
name: Visual
namespace:  foo_method\t

[Term]
id: CO_999:0000003
name: cm
namespace: other_ns

[Term]
id: CO_999:0000004
name: mm
namespace: foo_trait_extra
"""


def _terms_by_id(contents):
    return {s.get("id")[0]: s for s in parse_stanzas(contents) if s.stanza_type == "Term"}


def test_generate_id():
    assert generate_id("CO_360", "45") == "CO_360:0000045"
    assert generate_id("CO_360", "12345678") == "CO_360:12345678"
    assert generate_id("CO_360", None) is None


def test_obo_timestamp():
    assert obo_timestamp(NOW) == "02:01:2020 03:04"


def test_split_list():
    assert split_list(" Plant height, PH ,,") == ["Plant height", "PH"]
    assert split_list(None) == []


def test_stanza_tag_order():
    stanza = Stanza()
    stanza.add("relationship2", "variable_of CO_360:0000020")
    stanza.add("name", "Height")
    stanza.add("relationship1", "variable_of CO_360:0000010")
    stanza.add("xref", None)
    stanza.add("id", "CO_360:0000045")
    assert str(stanza) == (
        "[Term]\n"
        "id: CO_360:0000045\n"
        "name: Height\n"
        "relationship: variable_of CO_360:0000020\n"
        "relationship: variable_of CO_360:0000010\n"
    )


def test_stanza_rejects_unknown_tags():
    with pytest.raises(ValueError):
        Stanza().add("colour", "red")
    with pytest.raises(ValueError):
        Stanza("Typedef").add("namespace", "x")


def test_write_obo_header(height_records):
    contents = write_obo(height_records, "djw64", source="tw.xlsx", now=NOW)
    header = contents.split("\n\n")[0].splitlines()
    assert header == [
        "format-version: 1.2",
        "date: 02:01:2020 03:04",
        "saved-by: djw64",
        f"auto-generated-by: trait-ontology/{__version__}",
        "remark: This file was auto-generated from a 'Trait Workbook' [tw.xlsx]",
        "default-namespace: sugar_kelp",
        "ontology: CO_360",
    ]


def test_write_obo_terms(height_records):
    contents = write_obo(height_records, "djw64", now=NOW)
    stanzas = parse_stanzas(contents)
    typedefs = [s for s in stanzas if s.stanza_type == "Typedef"]
    assert [t.get("id") for t in typedefs] == [["method_of"], ["scale_of"], ["variable_of"]]
    assert typedefs[0].get("is_transitive") == ["true"]
    assert typedefs[2].get("is_transitive") == []

    terms = _terms_by_id(contents)
    assert terms["CO_360:ROOT"].get("namespace") == ["sugar_kelp"]
    assert terms["CO_360:Morphological"].get("is_a") == ["CO_360:ROOT"]

    trait = terms["CO_360:0000010"]
    assert trait.get("namespace") == ["sugar_kelp_trait"]
    assert trait.get("def") == ['"Height of the blade" []']
    assert trait.get("synonym") == ['"PH" EXACT []']
    assert trait.get("is_a") == ["CO_360:Morphological"]

    method = terms["CO_360:0000020"]
    assert method.get("namespace") == ["sugar_kelp_method"]
    assert method.get("relationship") == ["method_of CO_360:0000010"]

    scale = terms["CO_360:0000030"]
    assert scale.get("namespace") == ["sugar_kelp_scale"]
    assert scale.get("relationship") == ["scale_of CO_360:0000020"]

    variable = terms["CO_360:0000045"]
    assert variable.get("name") == ["PH_cm"]
    assert variable.get("namespace") == ["sugar_kelp_variable"]
    assert variable.get("def") == ['"Measured by eye (cm)" []']
    assert variable.get("synonym") == ['"Plant height" EXACT []', '"PH" EXACT []']
    assert variable.get("relationship") == [
        "variable_of CO_360:0000010",
        "variable_of CO_360:0000020",
        "variable_of CO_360:0000030",
    ]


def test_write_obo_scale_categories(height_records):
    height_records.scales.append(
        Scale(scale_id="31", name="1-3 color scale", categories=["1=Low", None, "3= High "])
    )
    contents = write_obo(height_records, "djw64", now=NOW)
    terms = _terms_by_id(contents)
    assert terms["CO_360:0000031"].get("def") == ['"1=Low, 3= High " []']
    low = terms["CO_360:0000031/1"]
    assert low.get("name") == ["Low"]
    assert low.get("synonym") == ['"1" EXACT []']
    assert low.get("is_a") == ["CO_360:0000031"]
    assert terms["CO_360:0000031/3"].get("name") == ["High"]
    assert "CO_360:0000031/2" not in terms


def test_write_obo_skips_unmatched_variables(height_records):
    height_records.variables.append(
        Variable(variable_id="46", name="orphan", trait_name="Height", method_name="Guess", scale_name="cm")
    )
    terms = _terms_by_id(write_obo(height_records, "djw64", now=NOW))
    assert "CO_360:0000045" in terms
    assert "CO_360:0000046" not in terms


def test_write_obo_uses_variable_label(height_records):
    height_records.variables[0].label = "Plant height in cm"
    terms = _terms_by_id(write_obo(height_records, "djw64", now=NOW))
    assert terms["CO_360:0000045"].get("name") == ["Plant height in cm"]


def test_update_header_key():
    contents = "format-version: 1.2\ndate: x\n\n[Term]\nid: A\ndate: y\n"
    updated = update_header_key(contents, "date", "02:01:2020 03:04")
    assert updated == "format-version: 1.2\ndate: 02:01:2020 03:04\n\n[Term]\nid: A\ndate: y\n"
    added = update_header_key(contents, "saved-by", "djw64")
    assert added == "format-version: 1.2\ndate: x\nsaved-by: djw64\n\n[Term]\nid: A\ndate: y\n"


def test_rewrite_namespaces():
    converted = rewrite_namespaces(STANDARD_OBO, "bar", ["foo_trait", "foo_method"], source="std.obo", now=NOW)
    header = converted.split("\n\n")[0].splitlines()
    assert "date: 02:01:2020 03:04" in header
    assert "default-namespace: bar" in header
    assert f"auto-generated-by: trait-ontology/{__version__}" in header
    assert (
        "remark: This file was converted to an SGN-compatible obo file from a standard obo file [std.obo]"
        in header
    )
    terms = _terms_by_id(converted)
    assert terms["CO_999:0000001"].get("namespace") == ["bar"]
    assert terms["CO_999:0000002"].get("namespace") == ["bar"]
    assert terms["CO_999:0000003"].get("namespace") == ["other_ns"]
    assert terms["CO_999:0000004"].get("namespace") == ["foo_trait_extra"]


def test_rewrite_namespaces_keeps_line_endings():
    contents = "default-namespace: foo\r\n\n[Term]\r\nid: A\r\nnamespace: foo\r\n"
    converted = rewrite_namespaces(contents, "bar", ["foo"], now=NOW)
    assert "namespace: bar\r\n" in converted


def test_stanza_from_mapping():
    stanza = Stanza.from_mapping(
        {
            "is_a1": "CO_360:0000031",
            "synonym1": '"1" EXACT []',
            "name": "Low",
            "id": "CO_360:0000031/1",
            "synonym2": '"one" EXACT []',
            "xref": None,
        }
    )
    assert stanza.lines() == [
        "id: CO_360:0000031/1",
        "name: Low",
        'synonym: "1" EXACT []',
        'synonym: "one" EXACT []',
        "is_a: CO_360:0000031",
    ]


def test_dictionary_to_obo(root):
    header, height = EXAMPLE_DICTIONARY.read_text().splitlines()[:2]
    records = records_from_dictionary(parse_dictionary(f"{header}\n{height}\n"), root)
    contents = write_obo(records, "djw64", now=NOW)
    assert contents.endswith("\n")
    terms = [s for s in parse_stanzas(contents) if s.stanza_type == "Term"]
    by_namespace = {}
    for term in terms:
        by_namespace.setdefault(term.get("namespace")[0], []).append(term)
    assert [t.get("id") for t in by_namespace["sugar_kelp"]] == [["CO_360:ROOT"], ["CO_360:Morphological"]]
    (trait,) = by_namespace["sugar_kelp_trait"]
    assert trait.get("is_a") == ["CO_360:Morphological"]
    assert trait.get("synonym") == ['"PH" EXACT []', '"Stature" EXACT []']
    (method,) = by_namespace["sugar_kelp_method"]
    assert method.get("relationship") == ["method_of CO_360:0000010"]
    (scale,) = by_namespace["sugar_kelp_scale"]
    assert scale.get("relationship") == ["scale_of CO_360:0000020"]
    (variable,) = by_namespace["sugar_kelp_variable"]
    assert len(variable.get("relationship")) == 3
    assert all(r.startswith("variable_of ") for r in variable.get("relationship"))


def test_write_obo_keeps_first_of_duplicated_names(height_records):
    height_records.traits.append(Trait(trait_id="99", name="Height", trait_class="Morphological trait"))
    height_records.methods.append(Method(method_id="98", name="Visual", method_class="Measurement"))
    height_records.scales.append(Scale(scale_id="97", name="cm"))
    terms = _terms_by_id(write_obo(height_records, "djw64", now=NOW))
    assert [i for i, t in terms.items() if t.get("name") == ["Height"]] == ["CO_360:0000010"]
    assert "CO_360:0000098" not in terms
    assert "CO_360:0000097" not in terms
    assert terms["CO_360:0000045"].get("relationship") == [
        "variable_of CO_360:0000010",
        "variable_of CO_360:0000020",
        "variable_of CO_360:0000030",
    ]


def test_write_obo_emits_unlisted_trait_classes(height_records):
    height_records.trait_classes = []
    height_records.traits.append(Trait(trait_id="12", name="Sorus area", trait_class="Reproductive traits"))
    terms = _terms_by_id(write_obo(height_records, "djw64", now=NOW))
    for trait_id, class_id in (
        ("CO_360:0000010", "CO_360:Morphological"),
        ("CO_360:0000012", "CO_360:Reproductive"),
    ):
        assert terms[trait_id].get("is_a") == [class_id]
        assert terms[class_id].get("is_a") == ["CO_360:ROOT"]
    assert terms["CO_360:Reproductive"].get("name") == ["Reproductive traits"]


def test_write_obo_relationships_for_shared_method(height_records):
    height_records.traits.append(Trait(trait_id="11", name="Blade color", trait_class="Morphological trait"))
    height_records.scales.append(Scale(scale_id="31", name="1-3 color scale", categories=["1=Light"]))
    height_records.variables.extend(
        [
            Variable(
                variable_id="46",
                name="BC_1to3",
                trait_name="Blade color",
                method_name="Visual",
                scale_name="1-3 color scale",
            ),
            Variable(
                variable_id="47",
                name="PH_cm_2",
                trait_name="Height",
                method_name="Visual",
                scale_name="cm",
            ),
        ]
    )
    terms = _terms_by_id(write_obo(height_records, "djw64", now=NOW))
    assert terms["CO_360:0000020"].get("relationship") == [
        "method_of CO_360:0000010",
        "method_of CO_360:0000011",
    ]
    assert terms["CO_360:0000030"].get("relationship") == ["scale_of CO_360:0000020"]
    assert terms["CO_360:0000031"].get("relationship") == ["scale_of CO_360:0000020"]


def test_rewrite_namespaces_in_crlf_file():
    contents = (
        "format-version: 1.2\r\ndate: 01:01:2019 00:00\r\ndefault-namespace: foo\r\n\r\n"
        "[Term]\r\nid: A\r\nnamespace: foo\r\n"
    )
    converted = rewrite_namespaces(contents, "bar", ["foo"], source="std.obo", now=NOW)
    header, body = converted.split("\r\n\r\n")
    assert header.split("\r\n") == [
        "format-version: 1.2",
        "date: 02:01:2020 03:04",
        "default-namespace: bar",
        f"auto-generated-by: trait-ontology/{__version__}",
        "remark: This file was converted to an SGN-compatible obo file from a standard obo file [std.obo]",
    ]
    assert body == "[Term]\r\nid: A\r\nnamespace: bar\r\n"


def test_update_header_key_without_body():
    assert update_header_key("format-version: 1.2\n", "saved-by", "djw64") == (
        "format-version: 1.2\nsaved-by: djw64\n"
    )
