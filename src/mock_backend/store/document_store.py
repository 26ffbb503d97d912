"""
In-memory document store with pluggable persistence.

The whole database is one JSON object whose top-level keys are resource
names. A key mapping to a list is a collection of records keyed by the id
field; a key mapping to an object is a singular resource. The document is
loaded once from the backend when the store is built and written back in
full after every mutation.
"""
import copy
import json
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional
from loguru import logger

from mock_backend.utils.errors import DuplicateIdError, NotFoundError, StoreError
from mock_backend.utils.helpers import js_str, singularize

Record = Dict[str, Any]


class StorageBackend:
    """Where the database document lives between process runs"""

    def load(self) -> Dict[str, Any]:
        raise NotImplementedError

    def save(self, data: Dict[str, Any]) -> None:
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    """Keeps snapshots in memory. Used by tests and throwaway servers."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.snapshot: Dict[str, Any] = copy.deepcopy(initial or {})
        self.save_count = 0

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self.snapshot)

    def save(self, data: Dict[str, Any]) -> None:
        self.snapshot = copy.deepcopy(data)
        self.save_count += 1


class JsonFileBackend(StorageBackend):
    """Reads and rewrites a single JSON file"""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.warning(f"{self.path} does not exist, starting with an empty database")
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"{self.path} must contain a JSON object at the top level")

        logger.info(f"Loaded {self.path} ({len(data)} resources)")
        return data

    def save(self, data: Dict[str, Any]) -> None:
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Could not write {self.path}: {e}") from e


class DocumentStore:
    """
    Handle on the shared database document.

    Handlers receive this object instead of reaching for module state; swap the
    backend to change where writes go.
    """

    def __init__(self, backend: StorageBackend, id_field: str = "id", foreign_key_suffix: str = "Id"):
        self.backend = backend
        self.id_field = id_field
        self.foreign_key_suffix = foreign_key_suffix
        self._data: Dict[str, Any] = backend.load()

    # Introspection

    def names(self) -> List[str]:
        return list(self._data.keys())

    def has(self, name: str) -> bool:
        return name in self._data

    def is_collection(self, name: str) -> bool:
        return isinstance(self._data.get(name), list)

    def is_singular(self, name: str) -> bool:
        return isinstance(self._data.get(name), dict)

    def snapshot(self) -> Dict[str, Any]:
        return self._data

    def summary(self) -> Dict[str, int]:
        """Record count per collection"""
        return {name: len(value) for name, value in self._data.items() if isinstance(value, list)}

    def persist(self) -> None:
        self.backend.save(self._data)

    def foreign_key(self, name: str) -> str:
        """Field that points at records of ``name`` (users -> userId)"""
        return singularize(name) + self.foreign_key_suffix

    # Collections

    def collection(self, name: str) -> List[Record]:
        value = self._data.get(name)
        if not isinstance(value, list):
            raise NotFoundError()
        return value

    def _index_of(self, records: List[Record], record_id: Any) -> int:
        wanted = js_str(record_id)
        for i, record in enumerate(records):
            if isinstance(record, dict) and self.id_field in record and js_str(record[self.id_field]) == wanted:
                return i
        return -1

    def find(self, name: str, record_id: Any) -> Optional[Record]:
        records = self.collection(name)
        i = self._index_of(records, record_id)
        return records[i] if i >= 0 else None

    def get(self, name: str, record_id: Any) -> Record:
        record = self.find(name, record_id)
        if record is None:
            raise NotFoundError()
        return record

    def _next_id(self, records: List[Record]) -> Any:
        ids = [r.get(self.id_field) for r in records if isinstance(r, dict) and self.id_field in r]
        if not ids:
            return 1
        if all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            return max(ids) + 1
        return uuid.uuid4().hex[:8]

    def insert(self, name: str, body: Record) -> Record:
        records = self.collection(name)
        record = dict(body)

        if record.get(self.id_field) is not None:
            if self._index_of(records, record[self.id_field]) >= 0:
                raise DuplicateIdError(f"Insert failed, duplicate id {js_str(record[self.id_field])}")
        else:
            record[self.id_field] = self._next_id(records)

        records.append(record)
        self.persist()
        logger.debug(f"Created {name}/{js_str(record[self.id_field])}")
        return record

    def replace(self, name: str, record_id: Any, body: Record) -> Record:
        records = self.collection(name)
        i = self._index_of(records, record_id)
        if i < 0:
            raise NotFoundError()

        record = {k: v for k, v in body.items() if k != self.id_field}
        record = {self.id_field: records[i][self.id_field], **record}
        records[i] = record
        self.persist()
        return record

    def update(self, name: str, record_id: Any, body: Record) -> Record:
        records = self.collection(name)
        i = self._index_of(records, record_id)
        if i < 0:
            raise NotFoundError()

        record = records[i]
        record.update({k: v for k, v in body.items() if k != self.id_field})
        self.persist()
        return record

    def delete(self, name: str, record_id: Any) -> Record:
        """Remove a record and every record in other collections pointing at it"""
        records = self.collection(name)
        i = self._index_of(records, record_id)
        if i < 0:
            raise NotFoundError()

        removed = records.pop(i)
        wanted = js_str(removed[self.id_field])
        fk = self.foreign_key(name)
        for other, value in self._data.items():
            if other == name or not isinstance(value, list):
                continue
            kept = [r for r in value if not (isinstance(r, dict) and fk in r and js_str(r[fk]) == wanted)]
            if len(kept) != len(value):
                logger.debug(f"Removed {len(value) - len(kept)} dependent {other} of {name}/{wanted}")
                self._data[other] = kept

        self.persist()
        return removed

    # Singular resources

    def singular(self, name: str) -> Record:
        value = self._data.get(name)
        if not isinstance(value, dict):
            raise NotFoundError()
        return value

    def replace_singular(self, name: str, body: Record) -> Record:
        self.singular(name)
        self._data[name] = dict(body)
        self.persist()
        return self._data[name]

    def update_singular(self, name: str, body: Record) -> Record:
        value = self.singular(name)
        value.update(body)
        self.persist()
        return value


def open_store(path, id_field: str = "id", foreign_key_suffix: str = "Id") -> DocumentStore:
    """File-backed store for a running server"""
    return DocumentStore(JsonFileBackend(path), id_field=id_field, foreign_key_suffix=foreign_key_suffix)
