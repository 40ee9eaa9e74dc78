"""
Shared fixtures: an in-memory stand-in for the Motor database and a
scripted geocoder, so the API can be exercised without MongoDB or the network.
"""
import copy

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import DESCENDING
from pymongo.errors import ServerSelectionTimeoutError

from georeport.config import Settings
from georeport.db import MongoStore
from georeport.errors import UpstreamError
from georeport.main import create_app


class _InsertOneResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, docs, fail=False):
        self._docs = docs
        self._fail = fail

    def sort(self, key, direction):
        self._docs = sorted(self._docs, key=lambda d: d[key], reverse=direction == DESCENDING)
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self._fail:
            raise ServerSelectionTimeoutError("no servers available")
        for doc in self._docs:
            yield doc


class FakeCollection:
    def __init__(self, db, name):
        self.db = db
        self.name = name
        self.docs = []
        self.indexes = []

    async def insert_one(self, doc):
        if self.db.fail_writes:
            raise ServerSelectionTimeoutError("no servers available")
        doc = copy.deepcopy(doc)
        doc["_id"] = ObjectId()
        self.docs.append(doc)
        return _InsertOneResult(doc["_id"])

    def find(self, query):
        return FakeCursor([copy.deepcopy(d) for d in self.docs], fail=self.db.fail_reads)

    async def create_index(self, keys):
        self.indexes.append(keys)
        return "_".join(f"{k}_{v}" for k, v in keys)


class FakeDatabase:
    def __init__(self):
        self.collections = {}
        self.fail_writes = False
        self.fail_reads = False

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    async def command(self, name):
        if self.fail_reads:
            raise ServerSelectionTimeoutError("no servers available")
        return {"ok": 1.0}

    def count(self, name):
        return len(self[name].docs)


class FakeGeocoder:
    def __init__(self, name="Bengaluru, Karnataka, India"):
        self.name = name
        self.error = None
        self.calls = []

    async def reverse_geocode(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.error is not None:
            raise self.error
        return self.name

    def fail_with_transport_error(self):
        self.error = UpstreamError("Geocoding service unreachable", cause=ConnectionError("refused"))


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    return MongoStore(database=fake_db)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def settings():
    return Settings(mongo_uri="mongodb://test", geocoding_enabled=True)


@pytest.fixture
def client(settings, store, geocoder):
    app = create_app(settings, store=store, geocoder=geocoder)
    with TestClient(app) as c:
        yield c
