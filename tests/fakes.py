from __future__ import annotations

from datetime import datetime, timezone


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, table_name: str, db: "FakeSupabase"):
        self.table_name = table_name
        self.db = db
        self.operation = "select"
        self.filters = []
        self.payload = None
        self.order_by = None
        self.limit_to = None

    def select(self, _fields: str = "*"):
        self.operation = "select"
        return self

    def insert(self, payload: dict):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, key: str, value):
        self.filters.append(("eq", key, value))
        return self

    def is_(self, key: str, value):
        self.filters.append(("is", key, value))
        return self

    def order(self, key: str, desc: bool = False):
        self.order_by = (key, desc)
        return self

    def limit(self, count: int):
        self.limit_to = count
        return self

    def _matches(self, row: dict) -> bool:
        for kind, key, value in self.filters:
            if kind == "eq" and row.get(key) != value:
                return False
            if kind == "is" and value == "null" and row.get(key) is not None:
                return False
        return True

    def execute(self):
        self.db.calls.append((self.table_name, self.operation))
        table = self.db.tables.setdefault(self.table_name, [])
        now = datetime.now(timezone.utc).isoformat()

        if self.operation == "insert":
            row = dict(self.payload or {})
            row.setdefault("id", f"{self.table_name}-{len(table) + 1}")
            row.setdefault("created_at", now)
            row.setdefault("updated_at", now)
            row.setdefault("deleted_at", None)
            table.append(row)
            return FakeResponse([dict(row)])

        matched = [row for row in table if self._matches(row)]

        if self.operation == "update":
            for row in matched:
                row.update(self.payload or {})
            return FakeResponse([dict(row) for row in matched])

        if self.operation == "delete":
            self.db.tables[self.table_name] = [row for row in table if row not in matched]
            return FakeResponse([dict(row) for row in matched])

        rows = [dict(row) for row in matched]
        if self.order_by:
            key, desc = self.order_by
            rows.sort(key=lambda row: str(row.get(key) or ""), reverse=desc)
        if self.limit_to is not None:
            rows = rows[: self.limit_to]
        return FakeResponse(rows)


class FakeRpc:
    def __init__(self, name: str, params: dict, db: "FakeSupabase"):
        self.name = name
        self.params = params
        self.db = db

    def execute(self):
        self.db.calls.append((self.name, "rpc"))
        self.db.rpc_calls.append((self.name, dict(self.params)))
        return FakeResponse(self.db.functions[self.name](self.db, self.params))


class FakeSupabase:
    def __init__(self, tables: dict | None = None, functions: dict | None = None):
        self.tables = {name: [dict(row) for row in rows] for name, rows in (tables or {}).items()}
        self.functions = dict(functions or {})
        self.calls: list[tuple[str, str]] = []
        self.rpc_calls: list[tuple[str, dict]] = []

    def table(self, table_name: str):
        return FakeQuery(table_name, self)

    def rpc(self, name: str, params: dict | None = None):
        return FakeRpc(name, params or {}, self)

    def rows(self, table_name: str) -> list[dict]:
        return self.tables.get(table_name, [])
