"""In-memory stand-in for the supabase-py query builder used in tests."""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class FakeResponse:
    data: List[Dict[str, Any]]


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: Optional[Dict[str, Any]] = None
        self._filters: List[tuple] = []

    def select(self, columns: str = "*") -> "FakeQuery":
        return self

    def insert(self, row: Dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "insert", row
        return self

    def update(self, row: Dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "update", row
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(str(row.get(col)) == str(val) for col, val in self._filters)

    def execute(self) -> FakeResponse:
        self._db.calls.append((self._table, self._op))
        if self._db.delay:
            time.sleep(self._db.delay)
        if self._db.error is not None:
            raise self._db.error
        rows = self._db.tables.setdefault(self._table, [])
        if self._op == "select":
            return FakeResponse([copy.deepcopy(r) for r in rows if self._matches(r)])
        if self._op == "insert":
            rows.append(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(self._payload)])
        if self._op == "update":
            changed = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    changed.append(copy.deepcopy(row))
            return FakeResponse(changed)
        kept, removed = [], []
        for row in rows:
            (removed if self._matches(row) else kept).append(row)
        self._db.tables[self._table] = kept
        return FakeResponse(removed)


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.tables = copy.deepcopy(tables or {})
        self.delay = 0.0
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)
