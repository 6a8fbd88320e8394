import pytest

from match_insight.prompts import MissingTemplateFieldsError, PromptTemplate, load_template, parse_front_matter

DEMO = """---
id: demo
version: 2
system_message: " Analyst "
requires: team
greeting: Hello
---
{{ greeting }} {{ team }}"""


def test_front_matter_is_split_from_body():
    metadata, body = parse_front_matter("---\nid: demo\nrequires: [name]\n---\nHello {{ name }}")

    assert metadata == {"id": "demo", "requires": ["name"]}
    assert body == "Hello {{ name }}"


def test_text_without_front_matter_is_returned_untouched():
    assert parse_front_matter("Plain body") == ({}, "Plain body")


def test_unterminated_front_matter_is_rejected():
    with pytest.raises(ValueError):
        parse_front_matter("---\nid: demo\nHello")


def test_non_mapping_front_matter_is_rejected():
    with pytest.raises(ValueError):
        parse_front_matter("---\n- a\n- b\n---\nbody")


def test_template_reads_identity_and_defaults_from_front_matter():
    template = PromptTemplate.from_text("demo.md", DEMO)

    assert (template.template_id, template.version) == ("demo", "2")
    assert template.system_message == "Analyst"
    assert template.requires == ("team",)
    assert dict(template.defaults) == {"greeting": "Hello"}


def test_render_applies_defaults_and_context_overrides():
    template = PromptTemplate.from_text("demo.md", DEMO)

    assert template.render({"team": "Spurs"}) == "Hello Spurs"
    assert template.render({"team": "Spurs", "greeting": "Hi"}) == "Hi Spurs"


def test_render_names_missing_required_fields():
    template = PromptTemplate.from_text("demo.md", DEMO)

    with pytest.raises(MissingTemplateFieldsError) as excinfo:
        template.render({})

    assert excinfo.value.missing == ("team",)
    assert isinstance(excinfo.value, KeyError)


def test_requires_must_be_names():
    with pytest.raises(ValueError):
        PromptTemplate.from_text("bad.md", "---\nrequires: {team: 1}\n---\nbody")


def test_packaged_match_prediction_template():
    template = load_template("match_prediction.md")

    assert template is load_template("match_prediction.md")
    assert template.template_id == "match_prediction"
    assert template.system_message == "You are a sports Analyst AI."
    assert {"home_team", "away_team", "weather"} <= set(template.requires)
    assert "empty_table" in template.defaults
