"""
Dialogue catalog.

A closed, read-only mapping of symbolic keys to dialogue content.
Catalogs are authored as JSON objects in the same shape the game's
content files use:

    {
        "ccWorking": {
            "message": "Don't touch anything! I think it's working.",
            "avatar": "/avatars/cc1.jpg",
            "speakerName": "C.C.",
            "choices": [{"text": "Hello Human!"}]
        }
    }

Every entry is validated against data/schemas/dialogue.schema.json.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

import jsonschema

from narrator.dialogue.content import DialogueContent, make_content
from narrator.dialogue.errors import CatalogError, ContentNotFoundError


SCHEMA_PATH = Path(__file__).resolve().parent.parent / "data" / "schemas" / "dialogue.schema.json"

_schema_cache: dict[str, Any] = {}


def load_schema() -> dict[str, Any]:
    """Load (once) the JSON schema for a single catalog entry."""
    if "dialogue" not in _schema_cache:
        with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
            _schema_cache["dialogue"] = json.load(f)
    return _schema_cache["dialogue"]


class DialogueCatalog:
    """
    Key -> DialogueContent lookup.

    Usage:
        catalog = DialogueCatalog.from_json_file("data/audio_puzzle.json")
        content = catalog.get("ccWorking")
    """

    def __init__(self, entries: Mapping[str, DialogueContent], name: str = "catalog"):
        self.name = name
        self._entries: dict[str, DialogueContent] = dict(entries)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> DialogueCatalog:
        """
        Build a catalog from authored data.

        Raises:
            CatalogError: If any entry fails schema validation
        """
        schema = load_schema()
        entries: dict[str, DialogueContent] = {}

        for key, entry in data.items():
            try:
                jsonschema.validate(instance=entry, schema=schema)
            except jsonschema.ValidationError as e:
                raise CatalogError(f"Invalid dialogue '{key}' in {name}: {e.message}") from e

            entries[key] = make_content(
                message=entry["message"],
                avatar=entry.get("avatar", ""),
                speaker_name=entry.get("speakerName", ""),
                choices=[choice["text"] for choice in entry.get("choices", [])],
            )

        catalog = cls(entries, name=name)
        catalog.logger.info(f"Loaded {len(entries)} dialogues into {name}")
        return catalog

    @classmethod
    def from_json_file(cls, path: Path | str, name: str | None = None) -> DialogueCatalog:
        """
        Load a catalog from a JSON file. The name defaults to the file stem.

        Raises:
            CatalogError: If the file is unreadable, not a JSON object,
                          or an entry fails validation
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Failed to load dialogue catalog {path}: {e}") from e

        if not isinstance(data, dict):
            raise CatalogError(f"Dialogue catalog {path} must be a JSON object")

        return cls.from_dict(name or path.stem, data)

    def get(self, key: str) -> DialogueContent:
        """
        Resolve a key.

        Raises:
            ContentNotFoundError: If the key is not in this catalog
        """
        try:
            return self._entries[key]
        except KeyError:
            raise ContentNotFoundError(key, self.name) from None

    lookup = get

    def require(self, keys: Iterable[str]) -> None:
        """Raise ContentNotFoundError for the first unknown key."""
        for key in keys:
            if key not in self._entries:
                raise ContentNotFoundError(key, self.name)

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"DialogueCatalog({self.name!r}, {len(self._entries)} entries)"
