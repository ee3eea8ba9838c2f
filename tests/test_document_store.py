# tests/test_document_store.py
import copy

import pytest
from pymongo.errors import ServerSelectionTimeoutError

import config
import document_store
from document_store import InMemoryDocumentStore, MongoDocumentStore, StoreUnavailable


class FakeCollection:
    def __init__(self, fail=False):
        self.docs = {}
        self.fail = fail

    def find_one(self, query):
        if self.fail:
            raise ServerSelectionTimeoutError("no servers")
        doc = self.docs.get(query['_id'])
        return copy.deepcopy(doc) if doc is not None else None

    def update_one(self, query, update, upsert=False):
        if self.fail:
            raise ServerSelectionTimeoutError("no servers")
        assert upsert
        doc = self.docs.setdefault(query['_id'], {'_id': query['_id']})
        doc.update(copy.deepcopy(update['$set']))


class FakeClient:
    def __init__(self, collection):
        self.collection = collection
        self.closed = False

    def __getitem__(self, name):
        # client[db][collection] both resolve here
        return self if name == 'pharmacy_db' else self.collection

    def close(self):
        self.closed = True


@pytest.fixture
def mongo():
    collection = FakeCollection()
    clients = []

    def factory(uri, serverSelectionTimeoutMS=None):
        client = FakeClient(collection)
        clients.append((uri, serverSelectionTimeoutMS, client))
        return client

    store = MongoDocumentStore(uri="mongodb://db:27017/", db_name='pharmacy_db',
                               collection='PharmaData', timeout_ms=500, client_factory=factory)
    return store, collection, clients


def test_mongo_fetch_absent_document(mongo):
    store, _, clients = mongo
    assert store.fetch_document('medicine') is None
    assert clients[0][:2] == ("mongodb://db:27017/", 500)
    assert clients[0][2].closed


def test_mongo_overwrite_then_fetch(mongo):
    store, collection, clients = mongo
    store.overwrite_field('medicine', 'medicines', [{'name': 'Aspirin'}])

    assert collection.docs['medicine'] == {'_id': 'medicine', 'medicines': [{'name': 'Aspirin'}]}
    assert store.fetch_document('medicine') == {'medicines': [{'name': 'Aspirin'}]}
    assert all(client.closed for _, _, client in clients)


def test_mongo_overwrite_replaces_whole_field(mongo):
    store, collection, _ = mongo
    store.overwrite_field('medicine', 'medicines', [{'name': 'A'}, {'name': 'B'}])
    store.overwrite_field('medicine', 'medicines', [{'name': 'C'}])
    assert collection.docs['medicine']['medicines'] == [{'name': 'C'}]


@pytest.mark.parametrize("call", [
    lambda s: s.fetch_document('medicine'),
    lambda s: s.overwrite_field('medicine', 'medicines', []),
])
def test_mongo_errors_become_store_unavailable(mongo, call):
    store, collection, clients = mongo
    collection.fail = True
    with pytest.raises(StoreUnavailable) as exc:
        call(store)
    assert exc.value.doc_id == 'medicine'
    assert isinstance(exc.value.cause, ServerSelectionTimeoutError)
    assert clients[-1][2].closed


def test_memory_store_hands_out_copies():
    store = InMemoryDocumentStore()
    records = [{'name': 'Aspirin'}]
    store.overwrite_field('medicine', 'medicines', records)
    records.append({'name': 'Bextra'})

    fetched = store.fetch_document('medicine')
    fetched['medicines'].clear()

    assert store.fetch_document('medicine') == {'medicines': [{'name': 'Aspirin'}]}
    assert store.fetch_document('sales') is None


def test_store_from_config(monkeypatch):
    monkeypatch.setattr(config, 'STORE_BACKEND', 'memory')
    assert isinstance(document_store.store_from_config(), InMemoryDocumentStore)
    monkeypatch.setattr(config, 'STORE_BACKEND', 'mongo')
    assert isinstance(document_store.store_from_config(), MongoDocumentStore)
