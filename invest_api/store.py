"""Flat JSON document store.

The whole datastore is a single JSON document whose top-level keys are
collections (``users``, ``products``, ``riskProfiles``, ``investments``,
``pontuacaoHistory``), each a list of objects carrying an integer ``id``.

Every operation re-reads the file, so several workers sharing one file see
each other's writes.  ``transaction()`` holds both a process-level lock and
a file lock, which makes a read-then-write sequence (e.g. "append a history
entry only if the score changed") serializable per store file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from filelock import FileLock

from invest_api.config import settings

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

COLLECTIONS = ("users", "products", "riskProfiles", "investments", "pontuacaoHistory")


class JsonDocumentStore:
    """Keyed lookups, field filters, append and update over a JSON file."""

    def __init__(
        self,
        path: str | Path,
        seed_path: str | Path | None = None,
        lock_timeout: float = 5.0,
    ) -> None:
        self.path = Path(path)
        self.seed_path = Path(seed_path) if seed_path else None
        self._thread_lock = threading.RLock()
        self._file_lock = FileLock(str(self.path) + ".lock", timeout=lock_timeout)
        self._ensure_exists()

    # ── File handling ────────────────────────────────────────────────────

    def _ensure_exists(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data: Dict[str, List[Document]] = {name: [] for name in COLLECTIONS}
        if self.seed_path is not None and self.seed_path.exists():
            with open(self.seed_path, "r", encoding="utf-8") as f:
                data.update(json.load(f))
            logger.info("Document store seeded from %s", self.seed_path)
        with self.transaction():
            self._save(data)

    def _load(self) -> Dict[str, List[Document]]:
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: Dict[str, List[Document]]) -> None:
        """Atomic write: dump to a temp file in the same directory, then replace."""
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            dir=str(self.path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, ValueError):
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    @contextmanager
    def transaction(self) -> Iterator["JsonDocumentStore"]:
        """Serialize a block of reads and writes against this store file."""
        with self._thread_lock:
            with self._file_lock:
                yield self

    # ── Reads ────────────────────────────────────────────────────────────

    def all(self, collection: str) -> List[Document]:
        with self.transaction():
            return list(self._load().get(collection, []))

    def get(self, collection: str, doc_id: int) -> Optional[Document]:
        for doc in self.all(collection):
            if doc.get("id") == doc_id:
                return doc
        return None

    def filter(self, collection: str, **criteria: Any) -> List[Document]:
        """Documents whose fields equal every ``criteria`` value."""
        return [
            doc
            for doc in self.all(collection)
            if all(doc.get(field) == value for field, value in criteria.items())
        ]

    # ── Writes ───────────────────────────────────────────────────────────

    def append(self, collection: str, doc: Document) -> Document:
        """Append *doc*, assigning ``id = max(id) + 1`` when it has none."""
        with self.transaction():
            data = self._load()
            docs = data.setdefault(collection, [])
            new_doc = dict(doc)
            if new_doc.get("id") is None:
                new_doc["id"] = max((d["id"] for d in docs), default=0) + 1
            docs.append(new_doc)
            self._save(data)
        logger.debug("Appended %s id=%s", collection, new_doc["id"])
        return new_doc

    def update(self, collection: str, doc_id: int, changes: Document) -> Optional[Document]:
        """Merge *changes* into the document; ``None`` when the id is unknown."""
        with self.transaction():
            data = self._load()
            for doc in data.get(collection, []):
                if doc.get("id") == doc_id:
                    doc.update(changes)
                    self._save(data)
                    logger.debug("Updated %s id=%s fields=%s", collection, doc_id, sorted(changes))
                    return dict(doc)
        return None


# ── FastAPI dependency ───────────────────────────────────────────────────

_store: Optional[JsonDocumentStore] = None


def get_store() -> JsonDocumentStore:
    """Lazily build the process-wide store from settings."""
    global _store
    if _store is None:
        _store = JsonDocumentStore(
            settings.DATA_FILE,
            seed_path=settings.SEED_FILE,
            lock_timeout=settings.STORE_LOCK_TIMEOUT,
        )
    return _store
