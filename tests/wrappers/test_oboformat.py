from trait_ontology.formats.obo import write_obo
from trait_ontology.wrappers import get_wrapper


def test_namespace_counts(tmp_path, height_records):
    path = tmp_path / "traits.obo"
    path.write_text(write_obo(height_records, "djw64"))
    wrapper = get_wrapper("oboformat", source_locator=path)
    objs = list(wrapper.objects())
    assert objs[0]["type"] == "Typedef"
    assert objs[0]["id"] == ["method_of"]
    counts = wrapper.namespace_counts()
    assert counts == {
        "sugar_kelp": 2,
        "sugar_kelp_trait": 1,
        "sugar_kelp_method": 1,
        "sugar_kelp_scale": 1,
        "sugar_kelp_variable": 1,
    }


def test_write_text(tmp_path):
    source = tmp_path / "in.obo"
    source.write_text("format-version: 1.2\n")
    wrapper = get_wrapper("oboformat", source_locator=source)
    target = tmp_path / "out.obo"
    wrapper.write_text(wrapper.read_text() + "ontology: CO_360\n", target)
    assert target.read_text() == "format-version: 1.2\nontology: CO_360\n"
