"""Persist and load credential documents (JSON), keyed by string."""
import json
import os
import threading
from pathlib import Path
from typing import Any, List, Optional

from statusify.errors import PersistenceError


class JsonDocumentStore:
    """Small document store on one JSON file: {"documents": {key: doc}}.

    set() inserts a missing key and otherwise updates the given fields (like
    a Mongo $set), remove() deletes the key. A missing file is an empty store.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            raise PersistenceError(f"Cannot read {self._path}: {e}") from e
        documents = data.get("documents") if isinstance(data, dict) else None
        if not isinstance(documents, dict):
            raise PersistenceError(f"Malformed store file {self._path}")
        return documents

    def _write(self, documents: dict[str, dict[str, Any]]) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps({"documents": documents}, indent=2))
            os.replace(tmp, self._path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self._path}: {e}") from e

    def get(self, key: str) -> List[dict[str, Any]]:
        """Return all documents stored under key (zero or one)."""
        with self._lock:
            doc = self._read().get(key)
        return [dict(doc)] if doc is not None else []

    def get_one(self, key: str) -> Optional[dict[str, Any]]:
        docs = self.get(key)
        return docs[0] if docs else None

    def set(self, key: str, doc: dict[str, Any]) -> None:
        with self._lock:
            documents = self._read()
            current = documents.get(key)
            if current is None:
                documents[key] = dict(doc)
            else:
                current.update(doc)
            self._write(documents)

    def remove(self, key: str) -> None:
        with self._lock:
            documents = self._read()
            if key not in documents:
                return
            del documents[key]
            self._write(documents)
