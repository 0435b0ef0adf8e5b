import dataclasses
import json
import pytest
from narrator.dialogue.catalog import DialogueCatalog
from narrator.dialogue.content import Plain, WithChoices, Choice, DialogueMessage, make_content
from narrator.dialogue.errors import CatalogError, ContentNotFoundError


def test_lookup_plain(catalog):
    content = catalog.get("A")
    assert isinstance(content, Plain)
    assert content.dialogue == DialogueMessage("m1", "/avatars/a.jpg", "Alice")
    assert not content.has_choices

def test_lookup_with_choices(catalog):
    content = catalog.lookup("ask")
    assert isinstance(content, WithChoices)
    assert content.choices == (Choice("yes"), Choice("no"))

def test_missing_fields_default_to_empty(catalog):
    content = catalog.get("confirm")
    assert content.dialogue.avatar == ""

def test_unknown_key_raises(catalog):
    with pytest.raises(ContentNotFoundError) as exc_info:
        catalog.get("nope")

    assert exc_info.value.key == "nope"
    assert "test" in str(exc_info.value)
    # Still a KeyError for callers that treat it as one
    assert isinstance(exc_info.value, KeyError)

def test_require(catalog):
    catalog.require(["A", "B"])
    with pytest.raises(ContentNotFoundError):
        catalog.require(["A", "missing", "B"])

def test_key_set(catalog):
    assert "A" in catalog
    assert "Z" not in catalog
    assert len(catalog) == 5
    assert set(catalog.keys()) == {"A", "B", "C", "ask", "confirm"}

def test_empty_choice_list_is_plain():
    catalog = DialogueCatalog.from_dict("t", {"x": {"message": "m", "choices": []}})
    assert isinstance(catalog.get("x"), Plain)

def test_validation_error():
    with pytest.raises(CatalogError):
        DialogueCatalog.from_dict("t", {"broken": {"avatar": "/a.jpg"}})
    with pytest.raises(CatalogError):
        DialogueCatalog.from_dict("t", {"broken": {"message": "m", "choices": [{"label": "x"}]}})

def test_from_json_file(tmp_path):
    path = tmp_path / "intro.json"
    with open(path, "w") as f:
        json.dump({"hello": {"message": "Hello", "speakerName": "Guide"}}, f)

    catalog = DialogueCatalog.from_json_file(path)

    assert catalog.name == "intro"
    assert catalog.get("hello").dialogue.speaker_name == "Guide"

def test_from_json_file_errors(tmp_path):
    with pytest.raises(CatalogError):
        DialogueCatalog.from_json_file(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(CatalogError):
        DialogueCatalog.from_json_file(bad)

    listing = tmp_path / "list.json"
    listing.write_text("[]")
    with pytest.raises(CatalogError):
        DialogueCatalog.from_json_file(listing)

def test_content_is_immutable():
    content = make_content("m", choices=["a"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        content.dialogue.message = "changed"

def test_with_choices_requires_choices():
    with pytest.raises(ValueError):
        WithChoices(DialogueMessage("m"), ())
