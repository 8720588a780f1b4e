"""In-memory stand-in for the Supabase async client.

Supports the slice of the PostgREST builder the service uses:
``table().select()/insert()/update()`` chained with ``eq``/``neq``/``is_``/
``in_``/``gt``/``lt``/``gte``/``lte``/``order``/``limit`` and an awaited
``execute()``; plus ``auth.get_user``.
"""

from copy import deepcopy
from types import SimpleNamespace
from typing import Any, Dict, List


class _Response:
    def __init__(self, data: List[Dict[str, Any]], count: int | None = None):
        self.data = data
        self.count = count


class _Query:
    def __init__(self, stub: "SupabaseStub", table: str, op: str, payload=None, columns: str = "*", count=None):
        self._stub = stub
        self._table = table
        self._op = op
        self._payload = payload
        self._columns = columns
        self._count = count
        self._filters: list[tuple] = []
        self._order: tuple | None = None
        self._limit: int | None = None

    def _filter(self, op, key, value):
        self._filters.append((op, key, value))
        return self

    def eq(self, key, value):
        return self._filter("eq", key, value)

    def neq(self, key, value):
        return self._filter("neq", key, value)

    def is_(self, key, value):
        return self._filter("is", key, value)

    def in_(self, key, value):
        return self._filter("in", key, value)

    def gt(self, key, value):
        return self._filter("gt", key, value)

    def lt(self, key, value):
        return self._filter("lt", key, value)

    def gte(self, key, value):
        return self._filter("gte", key, value)

    def lte(self, key, value):
        return self._filter("lte", key, value)

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matches(self, row):
        for op, key, value in self._filters:
            current = row.get(key)
            if op == "eq" and current != value:
                return False
            if op == "neq" and current == value:
                return False
            if op == "is" and current is not value:
                return False
            if op == "in" and current not in value:
                return False
            if op == "gt" and not (current is not None and current > value):
                return False
            if op == "lt" and not (current is not None and current < value):
                return False
            if op == "gte" and not (current is not None and current >= value):
                return False
            if op == "lte" and not (current is not None and current <= value):
                return False
        return True

    def _project(self, row):
        if self._columns in ("*", ""):
            return deepcopy(row)
        wanted = [c.strip() for c in self._columns.split(",")]
        return {c: deepcopy(row.get(c)) for c in wanted}

    async def execute(self, *_, **__):
        self._stub.calls.append((self._table, self._op))
        if (self._table, self._op) in self._stub.failures:
            raise RuntimeError("connection reset by peer")

        rows = self._stub.tables.setdefault(self._table, [])

        if self._op == "insert":
            row = deepcopy(self._payload)
            for column in self._stub.unique.get(self._table, ()):
                if any(existing.get(column) == row.get(column) for existing in rows):
                    raise Exception(
                        f'duplicate key value violates unique constraint "{self._table}_{column}_key"'
                    )
            rows.append(row)
            return _Response([deepcopy(row)])

        matched = [r for r in rows if self._matches(r)]

        if self._op == "update":
            for r in matched:
                r.update(deepcopy(self._payload))
            return _Response([deepcopy(r) for r in matched])

        if self._order:
            column, desc = self._order
            matched.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        total = len(matched)
        if self._limit:
            matched = matched[: self._limit]
        return _Response([self._project(r) for r in matched], count=total if self._count else None)


class _Table:
    def __init__(self, stub: "SupabaseStub", name: str):
        self._stub = stub
        self._name = name

    def select(self, *columns, count=None):
        return _Query(self._stub, self._name, "select", columns=",".join(columns) or "*", count=count)

    def insert(self, data):
        return _Query(self._stub, self._name, "insert", payload=data)

    def update(self, values):
        return _Query(self._stub, self._name, "update", payload=values)


class _Auth:
    def __init__(self):
        self.sessions: Dict[str, str] = {}

    async def get_user(self, jwt: str):
        user_id = self.sessions.get(jwt)
        if user_id is None:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=SimpleNamespace(id=user_id))


class SupabaseStub:  # noqa: D101
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.unique: Dict[str, tuple] = {"personal_tokens": ("token_hash",)}
        self.failures: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []
        self.auth = _Auth()

    def table(self, name: str) -> _Table:
        return _Table(self, name)

    def fail(self, table: str, op: str) -> None:
        """Make every later ``op`` ('select'/'insert'/'update') on *table* raise."""
        self.failures.add((table, op))

    def rows(self, table: str = "personal_tokens") -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def login(self, user_id: str) -> str:
        """Register a session JWT for *user_id* and return it."""
        jwt = f"jwt_{user_id}"
        self.auth.sessions[jwt] = user_id
        return jwt

    async def aclose(self):
        return None
