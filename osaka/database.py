import uuid
from typing import Any, Dict, List, Optional

from .errors import StoreError
from .store import RecordStore

# This file holds the in-memory record store used for local runs and tests.
# Every operation completes without awaiting, so no locking is needed.

TABLES: Dict[str, Dict[str, Dict[str, Any]]] = {
    "products": {},
    "hero_slides": {},
    "product_types": {},
}


def _sort_key(column: str):
    def key(row: Dict[str, Any]):
        value = row.get(column)
        return (value is None, value if value is not None else "")
    return key


class MemoryStore(RecordStore):
    def __init__(self, tables: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self.tables = TABLES if tables is None else tables

    def _rows(self, table: str) -> Dict[str, Dict[str, Any]]:
        if table not in self.tables:
            raise StoreError(f"unknown table {table!r}")
        return self.tables[table]

    async def _select(self, table: str, order_by: str) -> List[Dict[str, Any]]:
        rows = self._rows(table).values()
        return [dict(r) for r in sorted(rows, key=_sort_key(order_by))]

    async def _insert(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._rows(table)
        record_id = uuid.uuid4().hex
        rows[record_id] = {**payload, "id": record_id}
        return dict(rows[record_id])

    async def _update(self, table: str, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._rows(table)
        row = rows.get(record_id)
        if row is None:
            raise StoreError(f"{table}: no record with id {record_id}", status_code=404)
        row.update({k: v for k, v in changes.items() if k != "id"})
        return dict(row)

    async def _delete(self, table: str, record_id: str) -> None:
        self._rows(table).pop(record_id, None)


def reset() -> None:
    for rows in TABLES.values():
        rows.clear()
