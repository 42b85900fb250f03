from __future__ import annotations

import pytest

from statusify.core.credential_store import JsonDocumentStore
from statusify.errors import PersistenceError


def test_missing_file_is_empty_store(tmp_path):
    store = JsonDocumentStore(tmp_path / "nope" / "credentials.json")
    assert store.get("spotify.tokens") == []
    assert store.get_one("spotify.tokens") is None
    store.remove("spotify.tokens")


def test_set_inserts_then_updates_fields(tmp_path):
    store = JsonDocumentStore(tmp_path / "credentials.json")
    store.set("spotify.tokens", {"access": "a1", "refresh": "r1"})
    store.set("spotify.tokens", {"access": "a2"})
    assert store.get_one("spotify.tokens") == {"access": "a2", "refresh": "r1"}

    reopened = JsonDocumentStore(tmp_path / "credentials.json")
    assert reopened.get("spotify.tokens") == [{"access": "a2", "refresh": "r1"}]


def test_remove(tmp_path):
    store = JsonDocumentStore(tmp_path / "credentials.json")
    store.set("spotify.app", {"clientId": "x"})
    store.set("spotify.tokens", {"access": "a"})
    store.remove("spotify.tokens")
    assert store.get_one("spotify.tokens") is None
    assert store.get_one("spotify.app") == {"clientId": "x"}


@pytest.mark.parametrize("content", ["{not json", "[]", '{"documents": []}'])
def test_corrupt_file_raises(tmp_path, content):
    path = tmp_path / "credentials.json"
    path.write_text(content)
    store = JsonDocumentStore(path)
    with pytest.raises(PersistenceError):
        store.get_one("spotify.tokens")
    with pytest.raises(PersistenceError):
        store.set("spotify.tokens", {"access": "a"})
