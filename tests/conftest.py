# tests/conftest.py
import os
import tempfile

# settings are read at import time, so point them somewhere harmless first
_LOG_DIR = tempfile.mkdtemp(prefix="pharmadesk-tests-")
os.environ["STORE_BACKEND"] = "memory"
os.environ["ERROR_LOG_TO_MONGO"] = "false"
os.environ["ERROR_LOG_FILE"] = os.path.join(_LOG_DIR, "errors.log")
os.environ["AUDIT_LOG_FILE"] = os.path.join(_LOG_DIR, "audit.log")

import pytest

from document_store import InMemoryDocumentStore, StoreUnavailable


class RecordingStore(InMemoryDocumentStore):
    """In-memory store that remembers every call made to it."""

    def __init__(self, documents=None):
        super().__init__(documents)
        self.fetches = []
        self.overwrites = []

    def fetch_document(self, doc_id):
        self.fetches.append(doc_id)
        return super().fetch_document(doc_id)

    def overwrite_field(self, doc_id, field, sequence):
        self.overwrites.append((doc_id, field, list(sequence)))
        super().overwrite_field(doc_id, field, sequence)


class FailingStore(RecordingStore):
    """Raises StoreUnavailable on demand."""

    def __init__(self, documents=None, fail_fetch=False, fail_overwrite=False):
        super().__init__(documents)
        self.fail_fetch = fail_fetch
        self.fail_overwrite = fail_overwrite

    def fetch_document(self, doc_id):
        if self.fail_fetch:
            raise StoreUnavailable('fetch', doc_id, 'connection refused')
        return super().fetch_document(doc_id)

    def overwrite_field(self, doc_id, field, sequence):
        if self.fail_overwrite:
            raise StoreUnavailable('overwrite', doc_id, 'connection refused')
        super().overwrite_field(doc_id, field, sequence)


ASPIRIN = {'name': 'Aspirin', 'id': 'A1', 'quantity': '10', 'usage': '', 'sideEffects': ''}
BEXTRA = {'name': 'Bextra', 'id': 'B1', 'quantity': '5', 'usage': '', 'sideEffects': ''}


@pytest.fixture
def store():
    return RecordingStore({'medicine': {'medicines': [dict(ASPIRIN)]}})


@pytest.fixture
def empty_store():
    return RecordingStore()


@pytest.fixture
def app(store):
    from app import app as flask_app
    flask_app.config['TESTING'] = True
    original = flask_app.config['DOCUMENT_STORE']
    flask_app.config['DOCUMENT_STORE'] = store
    yield flask_app
    flask_app.config['DOCUMENT_STORE'] = original


@pytest.fixture
def client(app):
    return app.test_client()
