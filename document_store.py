# document_store.py
"""
Document store clients.

The application only needs two capabilities from the remote store:

    fetch_document(doc_id)                     -> dict or None
    overwrite_field(doc_id, field, sequence)   -> None

Every collection the app keeps (medicines, sales orders) lives as one
array-valued field inside one document, so nothing here knows about queries,
indexes or transactions.  Any failure talking to the backend is re-raised as
``StoreUnavailable``.
"""
import copy
import logging

from pymongo import MongoClient
from pymongo.errors import PyMongoError

import config

logger = logging.getLogger(__name__)


class StoreUnavailable(Exception):
    """The backing store could not be read or written."""

    def __init__(self, operation, doc_id, cause=None):
        self.operation = operation
        self.doc_id = doc_id
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Store {operation} failed for document '{doc_id}'{detail}")


class MongoDocumentStore:
    """Documents keyed by ``_id`` inside a single MongoDB collection.

    A fresh client is opened for every call and closed afterwards, which keeps
    the store safe to share across forked workers.
    """

    def __init__(self, uri=None, db_name=None, collection=None, timeout_ms=None, client_factory=MongoClient):
        self.uri = uri or config.MONGODB_URI
        self.db_name = db_name or config.MONGODB_DB
        self.collection = collection or config.PHARMA_COLLECTION
        self.timeout_ms = timeout_ms or config.MONGO_TIMEOUT_MS
        self._client_factory = client_factory

    def _client(self):
        return self._client_factory(self.uri, serverSelectionTimeoutMS=self.timeout_ms)

    def fetch_document(self, doc_id):
        client = None
        try:
            client = self._client()
            doc = client[self.db_name][self.collection].find_one({'_id': doc_id})
        except PyMongoError as e:
            logger.error("fetch of %s/%s failed: %s", self.collection, doc_id, e)
            raise StoreUnavailable('fetch', doc_id, e) from e
        finally:
            if client is not None:
                client.close()
        if doc is None:
            return None
        doc.pop('_id', None)
        return doc

    def overwrite_field(self, doc_id, field, sequence):
        client = None
        try:
            client = self._client()
            client[self.db_name][self.collection].update_one(
                {'_id': doc_id},
                {'$set': {field: list(sequence)}},
                upsert=True
            )
        except PyMongoError as e:
            logger.error("overwrite of %s/%s.%s failed: %s", self.collection, doc_id, field, e)
            raise StoreUnavailable('overwrite', doc_id, e) from e
        finally:
            if client is not None:
                client.close()


class InMemoryDocumentStore:
    """Process-local store with the same contract, for development and tests."""

    def __init__(self, documents=None):
        self.documents = copy.deepcopy(documents) if documents else {}

    def fetch_document(self, doc_id):
        doc = self.documents.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def overwrite_field(self, doc_id, field, sequence):
        self.documents.setdefault(doc_id, {})[field] = copy.deepcopy(list(sequence))


def store_from_config():
    """Build the store selected by ``STORE_BACKEND``."""
    if config.STORE_BACKEND == 'memory':
        logger.warning("Using the in-memory document store; data is lost on restart.")
        return InMemoryDocumentStore()
    return MongoDocumentStore()
