from collections import defaultdict
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.modules.auth import service as auth_service_module


class FakeResponse:
    def __init__(self, data=None, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records chained query-builder calls; execute() returns the configured response"""

    def __init__(self, client, name, params=None):
        self.client = client
        self.name = name
        self.params = params
        self.calls = []

    def __getattr__(self, item):
        if item.startswith("_"):
            raise AttributeError(item)

        def call(*args, **kwargs):
            self.calls.append((item, args, kwargs))
            return self
        return call

    @property
    def not_(self):
        self.calls.append(("not_", (), {}))
        return self

    def execute(self):
        return self.client._respond(self)

    def called(self, method):
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]

    def method_names(self):
        return [name for name, _, _ in self.calls]


class FakeBucket:
    def __init__(self, storage, bucket):
        self.storage = storage
        self.bucket = bucket

    def upload(self, path, file, file_options=None):
        self.storage.uploads.append((self.bucket, path, file, file_options))
        if self.storage.error:
            raise self.storage.error
        if self.storage.empty_response:
            return None
        return SimpleNamespace(path=path, full_path=f"{self.bucket}/{path}")


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.error = None
        self.empty_response = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    """In-memory stand-in for supabase.Client.

    respond(name, ...) queues a response for a table or RPC name; the last
    queued response is reused. A callable receives the query and returns a
    FakeResponse; an exception instance is raised from execute().
    """

    def __init__(self):
        self.queries = []
        self._responses = defaultdict(list)
        self.storage = FakeStorage()
        self.auth = MagicMock()

    def respond(self, name, data=None, count=None, error=None, handler=None):
        self._responses[name].append(error or handler or FakeResponse(data, count))

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query

    def rpc(self, fn, params=None):
        query = FakeQuery(self, fn, params=params)
        self.queries.append(query)
        return query

    def queries_for(self, name):
        return [q for q in self.queries if q.name == name]

    def _respond(self, query):
        queue = self._responses[query.name]
        if not queue:
            return FakeResponse([])
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(query)
        return item


def event_row(event_id=1, grouped=False, **overrides):
    row = {
        "id": event_id,
        "organizer": "organizer-1",
        "title": "Board game night",
        "description": "Bring your favourite game",
        "header_image": None,
        "datetime": "2030-05-01T18:00:00+00:00",
        "location": "Community hall",
        "max_participants": 20,
        "event_groups": None,
        "is_ended": False,
        "is_cancelled": False,
    }
    if grouped:
        row["event_groups"] = {
            "groupA": {"id": 10, "title": "A", "description": "descA"},
            "groupB": {"id": 11, "title": "B", "description": "descB"},
        }
    row.update(overrides)
    return row


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def user():
    return {"id": "user-1", "email": "ada@example.com", "user_metadata": {}, "app_metadata": {}}


@pytest.fixture(autouse=True)
def clear_auth_caches():
    auth_service_module._AUTH_USER_CACHE.clear()
    auth_service_module.clear_profile_store()
    yield
    auth_service_module._AUTH_USER_CACHE.clear()
    auth_service_module.clear_profile_store()
