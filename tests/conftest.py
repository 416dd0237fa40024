"""
Test fixtures: an in-memory stand-in for the Supabase client.

Only the slice of the client the services use is implemented: the PostgREST
query builder (select/insert/update/upsert/delete with eq, in_, order, limit,
offset), Storage buckets (upload, get_public_url) and the Auth calls.
"""

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import clear_auth_cache

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.order_by = None
        self.descending = False
        self.limit_count = None
        self.offset_count = 0
        self.type_error = None

    def select(self, *columns):
        self.operation = "select"
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def upsert(self, payload, on_conflict: Optional[str] = None):
        self.operation = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        if (self.table, column) in self.db.uuid_columns and not _is_uuid(value):
            self.type_error = f"invalid input syntax for type uuid: \"{value}\""
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc: bool = False):
        self.order_by = column
        self.descending = desc
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def offset(self, count):
        self.offset_count = count
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [row for row in self.db.rows(self.table) if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResult:
        if self.table in self.db.failing_tables:
            raise Exception(f"relation \"{self.table}\" is unavailable")
        if self.type_error:
            raise Exception(self.type_error)

        if self.operation == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResult([self.db.seed(self.table, payload) for payload in payloads])

        if self.operation == "upsert":
            key = self.on_conflict or "id"
            existing = [row for row in self.db.rows(self.table) if row.get(key) == self.payload.get(key)]
            if existing:
                existing[0].update(self.payload)
                return FakeResult([dict(existing[0])])
            return FakeResult([self.db.seed(self.table, self.payload)])

        rows = self._matching()

        if self.operation == "update":
            for row in rows:
                row.update(self.payload)
            return FakeResult([dict(row) for row in rows])

        if self.operation == "delete":
            self.db.tables[self.table] = [row for row in self.db.rows(self.table) if row not in rows]
            return FakeResult([dict(row) for row in rows])

        if self.order_by:
            rows = sorted(rows, key=lambda row: str(row.get(self.order_by) or ""), reverse=self.descending)
        rows = rows[self.offset_count:]
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        return FakeResult([dict(row) for row in rows])


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        self.storage.objects[(self.name, path)] = (file, file_options or {})
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects = {}

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeAuth:
    def __init__(self):
        self.tokens: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.sign_ups: List[dict] = []
        self.reset_requests: List[tuple] = []
        self.failing_emails = set()
        self.signed_out = 0

    def add_user(self, email: str, user_id: Optional[str] = None, token: Optional[str] = None) -> SimpleNamespace:
        user = SimpleNamespace(
            id=user_id or str(uuid.uuid4()),
            email=email,
            user_metadata={},
            app_metadata={},
            identities=[{"provider": "email"}],
            created_at=BASE_TIME.isoformat(),
            updated_at=None,
        )
        self.tokens[token or f"token-{user.id}"] = user
        return user

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=user)

    def sign_up(self, credentials):
        self.sign_ups.append(credentials)
        email = credentials["email"]
        if email in self.passwords:
            user = SimpleNamespace(id=str(uuid.uuid4()), email=email, identities=[])
            return SimpleNamespace(user=user, session=None)
        self.passwords[email] = credentials["password"]
        user = self.add_user(email)
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        email = credentials["email"]
        if self.passwords.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = next(token for token, user in self.tokens.items() if user.email == email)
        return SimpleNamespace(user=self.tokens[token], session=SimpleNamespace(access_token=token))

    def sign_out(self):
        self.signed_out += 1

    def reset_password_for_email(self, email, options=None):
        if email in self.failing_emails:
            raise Exception("Error sending recovery email")
        self.reset_requests.append((email, options or {}))


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failing_tables = set()
        # (table, column) pairs typed uuid: filtering them by anything else fails like PostgREST
        self.uuid_columns = set()
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self._clock = itertools.count(1)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def seed(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row the way PostgREST would: id and created_at filled in"""
        row = dict(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", (BASE_TIME + timedelta(seconds=next(self._clock))).isoformat())
        self.rows(table).append(row)
        return dict(row)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    fake = FakeSupabase()
    app.dependency_overrides[get_supabase] = lambda: fake
    app.dependency_overrides[get_service_supabase] = lambda: fake
    clear_auth_cache()
    yield fake
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def client(fake_supabase):
    return TestClient(app)


@pytest.fixture
def login(fake_supabase):
    """Factory: create an auth user and return (user, headers)"""

    def _login(email: str = "ada@acme.com", user_id: Optional[str] = None):
        user = fake_supabase.auth.add_user(email, user_id=user_id)
        return user, {"Authorization": f"Bearer token-{user.id}"}

    return _login


@pytest.fixture
def make_organization(fake_supabase):
    """Factory: organization row plus its owner membership"""

    def _make(owner_id: str, name: str = "Acme Inc", domain: Optional[str] = "acme.com"):
        organization = fake_supabase.seed("organizations", {"name": name, "domain": domain, "logo_url": None})
        fake_supabase.seed("organization_members", {
            "user_id": owner_id,
            "organization_id": organization["id"],
            "role": "owner",
            "is_owner": True,
        })
        return organization

    return _make
