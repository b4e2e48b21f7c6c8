import pytest

from brandmerge.schema import DEFAULT_REVISION, REVISIONS, get_revision


def _kinds(schema):
    return {spec.name: spec.kind for spec in schema.fields}


def _of_kind(schema, kind):
    return [spec.name for spec in schema.fields if spec.kind == kind]


def test_default_revision_booleans():
    schema = get_revision()
    assert schema.name == DEFAULT_REVISION
    assert _of_kind(schema, "boolean") == [
        "self_manufactured", "in_house_testing", "made_in_usa", "woman_owned",
    ]
    assert _of_kind(schema, "integer") == ["year_founded"]
    assert _of_kind(schema, "notes") == ["testing_qa_notes"]
    assert _of_kind(schema, "derived") == ["sources", "verification_status", "last_verified"]


def test_brand_and_slug_lead_every_revision():
    for schema in REVISIONS.values():
        assert [spec.name for spec in schema.fields[:2]] == ["brand", "slug"]


def test_legacy_revision_treats_claims_as_booleans():
    legacy = _kinds(get_revision("v1"))
    current = _kinds(get_revision("v2"))
    for name in ("proprietary_blends", "vegan", "allergen_free", "clinically_tested"):
        assert legacy[name] == "boolean"
        assert current[name] == "text"
    assert legacy["certifications"] == "array"
    assert "certification" not in legacy
    assert len(legacy) == len(current)


def test_known_columns_include_aliases():
    known = get_revision().known_columns()
    assert "sustainablity" in known
    assert "certifications" in known
    assert "notion_id" not in known


def test_unknown_revision():
    with pytest.raises(ValueError, match="Unknown schema revision"):
        get_revision("v9")
