"""
Pytest configuration and fixtures for Tastebook tests.
"""

import copy
import os
import uuid
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

# Set test environment before importing tastebook modules
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["TASTEBOOK_ENV"] = "development"


# =============================================================================
# In-memory Supabase
# =============================================================================


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


def _coerce(value: str):
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None
    return value


class _Not:
    def __init__(self, query: "FakeQuery"):
        self._query = query

    def is_(self, column, value):
        self._query._filters.append(lambda row: row.get(column) is not _coerce(value))
        return self._query


class FakeQuery:
    """Just enough of the postgrest query builder for the services."""

    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self._table = table
        self._op = None
        self._payload = None
        self._filters = []
        self._orders = []
        self._limit = None
        self._single = False
        self._maybe_single = False
        self._count = None
        self._head = False
        self._upsert_conflict = None
        self._ignore_duplicates = False

    # -- operations ---------------------------------------------------------

    def select(self, columns="*", count=None, head=False):
        self._op = self._op or "select"
        self._count = count
        self._head = head
        return self

    def insert(self, payload):
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload):
        self._op, self._payload = "update", payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def upsert(self, payload, on_conflict="", ignore_duplicates=False):
        self._op, self._payload = "upsert", payload
        self._upsert_conflict = [c.strip() for c in on_conflict.split(",") if c.strip()]
        self._ignore_duplicates = ignore_duplicates
        return self

    # -- filters ------------------------------------------------------------

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def lte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and row[column] <= value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def contains(self, column, values):
        self._filters.append(lambda row: all(v in (row.get(column) or []) for v in values))
        return self

    def or_(self, expression):
        conditions = []
        for part in expression.split(","):
            column, _op, value = part.split(".", 2)
            conditions.append((column, _coerce(value)))
        self._filters.append(lambda row: any(row.get(c) == v for c, v in conditions))
        return self

    @property
    def not_(self):
        return _Not(self)

    def text_search(self, column, query, options=None):
        needle = query.lower()
        self._filters.append(lambda row: needle in (row.get(column) or "").lower())
        return self

    # -- modifiers ----------------------------------------------------------

    def order(self, column, desc=False, nullsfirst=None):
        self._orders.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def single(self):
        self._single = True
        return self

    def maybe_single(self):
        self._maybe_single = True
        return self

    # -- execution ----------------------------------------------------------

    def _matching(self):
        return [row for row in self._db.tables.setdefault(self._table, []) if all(f(row) for f in self._filters)]

    def _sorted(self, rows):
        for column, desc in reversed(self._orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            rows = present + missing
        return rows

    def execute(self):
        if self._table in self._db.failing_tables:
            raise APIError({"message": f"{self._table} unavailable", "code": "500"})

        if self._op == "insert":
            rows = self._payload if isinstance(self._payload, list) else [self._payload]
            return FakeResponse([copy.deepcopy(self._db.add_row(self._table, row)) for row in rows])

        if self._op == "upsert":
            row = self._payload
            existing = [
                r for r in self._db.tables.setdefault(self._table, [])
                if all(r.get(c) == row.get(c) for c in self._upsert_conflict)
            ]
            if existing:
                if not self._ignore_duplicates:
                    existing[0].update(row)
                return FakeResponse([])
            return FakeResponse([copy.deepcopy(self._db.add_row(self._table, row))])

        rows = self._matching()

        if self._op == "update":
            for row in rows:
                row.update(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(r) for r in rows])

        if self._op == "delete":
            table = self._db.tables[self._table]
            self._db.tables[self._table] = [r for r in table if r not in rows]
            return FakeResponse([copy.deepcopy(r) for r in rows])

        rows = self._sorted(rows)
        total = len(rows)
        if self._limit is not None:
            rows = rows[: self._limit]

        if self._single:
            if len(rows) != 1:
                raise APIError({"message": "JSON object requested, multiple (or no) rows returned", "code": "PGRST116"})
            return FakeResponse(copy.deepcopy(rows[0]))
        if self._maybe_single:
            return FakeResponse(copy.deepcopy(rows[0])) if rows else None

        data = [] if self._head else [copy.deepcopy(r) for r in rows]
        return FakeResponse(data, count=total if self._count else None)


class FakeRpc:
    def __init__(self, result):
        self._result = result

    def execute(self):
        if isinstance(self._result, Exception):
            raise self._result
        return FakeResponse(self._result)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self._storage = storage
        self._name = name

    def upload(self, path, data, file_options=None):
        self._storage.files[(self._name, path)] = {"data": data, "options": file_options or {}}
        return {"Key": f"{self._name}/{path}"}

    def remove(self, paths):
        for path in paths:
            self._storage.removed.append((self._name, path))
            self._storage.files.pop((self._name, path), None)
        return []

    def get_public_url(self, path):
        return f"https://test.supabase.co/storage/v1/object/public/{self._name}/{path}"


class FakeStorage:
    def __init__(self):
        self.files = {}
        self.removed = []

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    """
    In-memory stand-in for the Supabase client.

    Rows live in `tables`; RPC results are set in `rpc_results` (an exception
    value is raised). Tables listed in `failing_tables` raise APIError.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.rpc_results: dict[str, object] = {}
        self.rpc_calls: list[tuple[str, dict]] = []
        self.failing_tables: set[str] = set()
        self.storage = FakeStorage()
        self.auth = MagicMock()
        self._clock = datetime(2026, 1, 1, 12, 0, 0)

    def add_row(self, table: str, row: dict) -> dict:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        self._clock += timedelta(seconds=1)
        stored.setdefault("created_at", self._clock.isoformat())
        self.tables.setdefault(table, []).append(stored)
        return stored

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        self.rpc_calls.append((name, params))
        return FakeRpc(self.rpc_results.get(name))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    for method in ("select", "insert", "update", "delete", "upsert", "eq", "gte", "lte",
                   "in_", "or_", "contains", "order", "limit", "single", "maybe_single",
                   "text_search"):
        getattr(mock_table, method).return_value = mock_table
    mock_table.not_.is_.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[], count=0)

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def fake_supabase():
    """Stateful in-memory Supabase client."""
    return FakeSupabase()


@pytest.fixture
def user_id():
    return "user-1"


@pytest.fixture
def sample_recipe():
    """Sample recipe row."""
    return {
        "id": "recipe-1",
        "user_id": "user-1",
        "title": "Tortilla de patatas",
        "description": "La clásica",
        "ingredients": [
            {"name": "Patatas", "quantity": 4, "unit": "unidades", "category": "vegetables"},
            {"name": "Huevos", "quantity": 6, "unit": "unidades", "category": "dairy"},
            {"name": "Cebolla", "quantity": 1, "unit": "unidad", "category": "vegetables"},
            {"name": "Aceite de oliva", "quantity": 100, "unit": "ml", "category": "pantry"},
        ],
        "steps": ["Pelar y cortar", "Freír", "Batir los huevos", "Cuajar"],
        "prep_time": 15,
        "cook_time": 30,
        "servings": 4,
        "difficulty": "media",
        "tags": ["española", "cena"],
        "nutrition": {"calories": 350},
        "is_public": True,
        "views_count": 0,
        "favorites_count": 0,
        "rating_avg": 4.5,
        "rating_count": 2,
    }


@pytest.fixture
def sample_recipes(sample_recipe):
    """A few public recipes with different ingredients and ratings."""
    return [
        sample_recipe,
        {
            "id": "recipe-2",
            "user_id": "user-2",
            "title": "Ensalada de tomate",
            "ingredients": [
                {"name": "Tomate", "quantity": 3, "unit": "unidades"},
                {"name": "Cebolla", "quantity": 1, "unit": "unidad"},
            ],
            "steps": ["Cortar", "Aliñar"],
            "prep_time": 10,
            "servings": 2,
            "difficulty": "facil",
            "tags": ["verano"],
            "nutrition": {"calories": 120},
            "is_public": True,
            "rating_avg": 3.0,
            "rating_count": 1,
        },
        {
            "id": "recipe-3",
            "user_id": "user-2",
            "title": "Pollo al ajillo",
            "ingredients": [
                {"name": "Pollo", "quantity": 1, "unit": "kg"},
                {"name": "Ajo", "quantity": 6, "unit": "dientes"},
                {"name": "Vino blanco", "quantity": 100, "unit": "ml"},
            ],
            "steps": ["Dorar", "Añadir ajo", "Reducir vino"],
            "prep_time": 10,
            "cook_time": 40,
            "servings": 4,
            "difficulty": "media",
            "tags": ["cena"],
            "nutrition": {},
            "is_public": True,
            "rating_avg": None,
            "rating_count": 0,
        },
    ]
