"""
In-memory stand-ins for external collaborators used by the API tests.

FakeSupabase implements the slice of the supabase-py fluent query API the
backend uses: table/select/insert/update/delete, eq/ilike filters,
order/range/limit, count="exact", and rpc.
"""

from __future__ import annotations

import copy
import datetime as dt
import itertools
import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.count_mode: Optional[str] = None
        self.filters: List[Any] = []
        self.orders: List[Any] = []
        self.bounds: Optional[tuple] = None
        self.max_rows: Optional[int] = None

    # --- operations ---
    def select(self, _columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self.op, self.count_mode = "select", count
        return self

    def insert(self, data: Any) -> "FakeQuery":
        self.op, self.payload = "insert", data
        return self

    def update(self, data: Dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "update", data
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    # --- filters & modifiers ---
    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        regex = re.compile(
            "^" + ".*".join(re.escape(part) for part in pattern.split("%")) + "$", re.I
        )
        self.filters.append(lambda row: bool(regex.match(str(row.get(column) or ""))))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self.bounds = (start, end)
        return self

    def limit(self, n: int) -> "FakeQuery":
        self.max_rows = n
        return self

    # --- execution ---
    def _matching(self) -> List[Dict[str, Any]]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self) -> SimpleNamespace:
        self.db.calls.append((self.table_name, self.op))
        if self.table_name in self.db.failing_tables:
            raise RuntimeError(f"simulated failure on '{self.table_name}'")

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.add(self.table_name, item) for item in items]
            return SimpleNamespace(data=copy.deepcopy(inserted), count=None)

        matching = self._matching()
        if self.op == "update":
            for row in matching:
                row.update(self.payload)
            return SimpleNamespace(data=copy.deepcopy(matching), count=None)

        if self.op == "delete":
            rows = self.db.tables[self.table_name]
            self.db.tables[self.table_name] = [r for r in rows if r not in matching]
            return SimpleNamespace(data=copy.deepcopy(matching), count=None)

        for column, desc in reversed(self.orders):
            matching.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        total = len(matching)
        if self.bounds is not None:
            start, end = self.bounds
            matching = matching[start:end + 1]
        if self.max_rows is not None:
            matching = matching[: self.max_rows]
        return SimpleNamespace(
            data=copy.deepcopy(matching),
            count=total if self.count_mode == "exact" else None,
        )


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.db, self.name, self.params = db, name, params

    def execute(self) -> SimpleNamespace:
        self.db.rpc_calls.append((self.name, self.params))
        if self.name == "increment_comment_count":
            for post in self.db.tables.get("network_posts", []):
                if post.get("id") == self.params.get("post_id"):
                    post["comment_count"] = (post.get("comment_count") or 0) + 1
        return SimpleNamespace(data=None, count=None)


class FakeSupabase:
    """Dict-of-lists database with auto ids and strictly increasing created_at."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.rpc_calls: List[tuple] = []
        self.failing_tables: set = set()
        self._ids = itertools.count(1)
        self._clock = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def add(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert directly (also used to seed fixtures); returns the stored row."""
        stored = dict(row)
        stored.setdefault("id", f"{table}-{next(self._ids)}")
        if "created_at" not in stored:
            self._clock += dt.timedelta(seconds=1)
            stored["created_at"] = self._clock.isoformat()
        self.tables.setdefault(table, []).append(stored)
        return stored

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])


def place(title: str, **extra: Any) -> Dict[str, Any]:
    """A Serper-shaped places result."""
    return {"title": title, **extra}
