import copy

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from app.core.database import MongoConnector, get_connector
from main import app


class FakeCollection:
    """In-memory stand-in for an async pymongo collection."""

    def __init__(self):
        self.documents = []
        self.unique_fields = set()

    @staticmethod
    def _matches(document, filter):
        return all(document.get(key) == value for key, value in filter.items())

    async def create_index(self, field, unique=False):
        if unique:
            self.unique_fields.add(field)
        return f"{field}_1"

    async def count_documents(self, filter):
        return sum(1 for d in self.documents if self._matches(d, filter))

    async def find_one(self, filter):
        for document in self.documents:
            if self._matches(document, filter):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document):
        for field in self.unique_fields:
            if any(d.get(field) == document.get(field) for d in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error dup key: {{ {field}: ... }}", 11000)
        self.documents.append(copy.deepcopy(document))


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FakeClient:
    instances = []

    def __init__(self, uri):
        self.uri = uri
        self.connect_calls = 0
        self.closed = False
        self.databases = {}
        FakeClient.instances.append(self)

    async def aconnect(self):
        self.connect_calls += 1

    def __getitem__(self, name):
        return self.databases.setdefault(name, FakeDatabase())

    async def close(self):
        self.closed = True


class UnreachableClient(FakeClient):
    async def aconnect(self):
        raise ServerSelectionTimeoutError("No servers found yet")


@pytest.fixture(autouse=True)
def reset_fake_clients():
    FakeClient.instances = []
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def connector():
    return MongoConnector(
        "mongodb://fake",
        "groupmeal",
        client_factory=FakeClient,
        unique_indexes={"waitlist": "email"},
    )


@pytest.fixture
def broken_connector():
    return MongoConnector("mongodb://unreachable", "groupmeal", client_factory=UnreachableClient)


@pytest_asyncio.fixture
async def client(connector):
    app.dependency_overrides[get_connector] = lambda: connector
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def broken_client(broken_connector):
    app.dependency_overrides[get_connector] = lambda: broken_connector
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def fake_client_cls():
    return FakeClient
