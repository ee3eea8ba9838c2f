# synchronizer.py
"""
Whole-document list synchronization.

A collection is one array field inside one document.  ``load()`` reads the
whole array, and every mutation rebuilds the array in memory and writes all
of it back with a single ``overwrite_field`` call.

There is no version token and no merge: two sessions committing against the
same document overwrite each other and the last commit wins.  That silent
loss (a "stale overwrite") is part of the contract, not something this class
tries to detect.

State machine::

    IDLE -> LOADING -> READY
    READY -> COMMITTING -> READY
    LOADING / COMMITTING -> FAILED      (left only through a fresh load())
"""
import logging
from enum import Enum

import config
from document_store import StoreUnavailable
from models import Medicine

logger = logging.getLogger(__name__)


class SyncState(Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    READY = 'ready'
    COMMITTING = 'committing'
    FAILED = 'failed'


class NotReady(RuntimeError):
    """A mutation was attempted outside the READY state."""


class ListSynchronizer:

    def __init__(self, store, doc_id, field, record_type):
        self.store = store
        self.doc_id = doc_id
        self.field = field
        self.record_type = record_type
        self.state = SyncState.IDLE
        self._items = []

    @property
    def items(self):
        """The working sequence (a copy; the records themselves are shared)."""
        return list(self._items)

    def __len__(self):
        return len(self._items)

    def load(self):
        self.state = SyncState.LOADING
        try:
            doc = self.store.fetch_document(self.doc_id)
        except StoreUnavailable:
            self.state = SyncState.FAILED
            raise
        raw = (doc or {}).get(self.field) or []
        self._items = [self.record_type.from_dict(entry) for entry in raw]
        self.state = SyncState.READY
        logger.info("Loaded %d record(s) from %s.%s", len(self._items), self.doc_id, self.field)
        return self.items

    def commit(self, new_sequence):
        """Replace the in-memory sequence and overwrite the stored field with it."""
        self._require_ready()
        self._items = list(new_sequence)
        self.state = SyncState.COMMITTING
        try:
            self.store.overwrite_field(self.doc_id, self.field, [r.to_dict() for r in self._items])
        except StoreUnavailable:
            # local copy now differs from the stored one until the next load()
            self.state = SyncState.FAILED
            raise
        self.state = SyncState.READY
        logger.info("Committed %d record(s) to %s.%s", len(self._items), self.doc_id, self.field)
        return self.items

    def add(self, record):
        self._require_ready()
        return self.commit(self._items + [record])

    def update(self, index, record):
        self._require_ready()
        self._check_index(index)
        new_sequence = list(self._items)
        new_sequence[index] = record
        return self.commit(new_sequence)

    def delete(self, index):
        self._require_ready()
        self._check_index(index)
        new_sequence = self._items[:index] + self._items[index + 1:]
        return self.commit(new_sequence)

    def index_of(self, record):
        """Position of ``record`` by identity, not equality."""
        for position, item in enumerate(self._items):
            if item is record:
                return position
        raise ValueError(f"record is not part of {self.doc_id}.{self.field}")

    def _require_ready(self):
        if self.state is not SyncState.READY:
            raise NotReady(f"{self.doc_id}.{self.field} is {self.state.value}; load() first")

    def _check_index(self, index):
        if not 0 <= index < len(self._items):
            raise IndexError(f"no record at position {index} in {self.doc_id}.{self.field}")


class MedicineListSynchronizer(ListSynchronizer):

    def __init__(self, store, doc_id=config.MEDICINE_DOC, field=config.MEDICINE_FIELD):
        super().__init__(store, doc_id, field, Medicine)
