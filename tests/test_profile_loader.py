"""
Owner profile chunk source.
"""

import json

import pytest

from src.core.errors import InvalidInputError
from src.ingest.profile_loader import flatten_profile, load_profile


PROFILE = {
    "name": "Sam Rivera",
    "hobbies": ["hiking", "chess"],
    "education": {
        "degree": "BSc Computer Science",
        "graduated": 2019,
        "honours": True,
    },
    "website": None,
}


def test_flatten_emits_one_chunk_per_leaf_plus_full_context():
    chunks = flatten_profile(PROFILE)

    assert [c["metadata"]["field"] for c in chunks] == [
        "name",
        "hobbies",
        "education.degree",
        "education.graduated",
        "education.honours",
        "website",
        "full_profile",
    ]


def test_leaf_content_and_metadata():
    chunks = {c["metadata"]["field"]: c for c in flatten_profile(PROFILE, source="me.json")}

    assert chunks["hobbies"]["content"] == "hobbies: hiking, chess"
    assert chunks["hobbies"]["metadata"] == {"field": "hobbies", "dataType": "array", "source": "me.json"}
    assert chunks["education.degree"]["content"] == "education: degree: BSc Computer Science"
    assert chunks["education.graduated"]["metadata"]["dataType"] == "number"
    assert chunks["education.honours"]["content"] == "education: honours: true"
    assert chunks["education.honours"]["metadata"]["dataType"] == "boolean"
    assert chunks["website"]["content"] == "website: "
    assert chunks["website"]["metadata"]["dataType"] == "null"


def test_full_context_chunk():
    full = flatten_profile(PROFILE)[-1]

    assert full["content"].startswith("Full personal profile: {")
    assert json.loads(full["content"][len("Full personal profile: "):]) == PROFILE
    assert full["metadata"]["isFullContext"] is True
    assert full["metadata"]["dataType"] == "object"


def test_flatten_rejects_non_object():
    with pytest.raises(InvalidInputError):
        flatten_profile(["not", "an", "object"])


def test_load_profile_reads_file(tmp_path):
    path = tmp_path / "owner_profile.json"
    path.write_text(json.dumps(PROFILE), encoding="utf-8")

    chunks = load_profile(str(path))

    assert len(chunks) == 7
    assert chunks[0]["metadata"]["source"] == "owner_profile.json"


def test_load_profile_missing_file(tmp_path):
    with pytest.raises(InvalidInputError):
        load_profile(str(tmp_path / "missing.json"))


def test_load_profile_malformed_file(tmp_path):
    path = tmp_path / "owner_profile.json"
    path.write_text("{oops", encoding="utf-8")

    with pytest.raises(InvalidInputError):
        load_profile(str(path))


def test_profile_chunks_build_a_store(keyword_store):
    report = keyword_store.build(flatten_profile(PROFILE))

    # "website: " still has content, so every chunk is kept
    assert report.indexed == 7
    assert "full_profile" in keyword_store.stats()["field_names"]
    assert keyword_store.search("hobbies", field_filter="hobbies", top_k=1)[0].content == "hobbies: hiking, chess"
