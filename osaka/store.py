# osaka/store.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import StoreError
from .models import HeroSlide, Product, ProductType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSpec:
    name: str
    model: Type[BaseModel]
    order_by: str


PRODUCTS = TableSpec("products", Product, "category")
HERO_SLIDES = TableSpec("hero_slides", HeroSlide, "display_order")
PRODUCT_TYPES = TableSpec("product_types", ProductType, "name")


class RecordStore:
    """Raw row access shared by every backend.

    Subclasses implement the four ``_`` coroutines on plain dict rows;
    callers go through :meth:`table` and get typed records back.
    """

    async def _select(self, table: str, order_by: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def _insert(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def _update(self, table: str, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def _delete(self, table: str, record_id: str) -> None:
        raise NotImplementedError

    def table(self, spec: TableSpec) -> "Table":
        return Table(self, spec)


class Table:
    def __init__(self, store: RecordStore, spec: TableSpec):
        self.store = store
        self.spec = spec

    def _record(self, row: Dict[str, Any]):
        try:
            return self.spec.model.model_validate(row)
        except PydanticValidationError as e:
            logger.error("%s: malformed row from store: %s", self.spec.name, e)
            raise StoreError(f"{self.spec.name}: malformed row {row.get('id')!r}") from e

    async def list(self, order_by: Optional[str] = None) -> List[Any]:
        column = order_by or self.spec.order_by
        logger.debug("%s: list order_by=%s", self.spec.name, column)
        rows = await self.store._select(self.spec.name, column)
        return [self._record(r) for r in rows]

    async def insert(self, payload: Dict[str, Any]):
        logger.debug("%s: insert %s", self.spec.name, sorted(payload))
        return self._record(await self.store._insert(self.spec.name, payload))

    async def update(self, record_id: str, changes: Dict[str, Any]):
        logger.debug("%s: update id=%s fields=%s", self.spec.name, record_id, sorted(changes))
        return self._record(await self.store._update(self.spec.name, record_id, changes))

    async def delete(self, record_id: str) -> None:
        logger.debug("%s: delete id=%s", self.spec.name, record_id)
        await self.store._delete(self.spec.name, record_id)


# ---------------------------
# Supabase (PostgREST) backend
# ---------------------------
def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return f"HTTP {r.status_code}: {r.text}"
    if isinstance(body, dict):
        return f"HTTP {r.status_code}: {body.get('message') or body.get('error') or body}"
    return f"HTTP {r.status_code}: {body}"


class SupabaseStore(RecordStore):
    def __init__(self, url: str, key: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self._transport = transport

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.key, "Authorization": f"Bearer {self.key}"}
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(self, method: str, table: str, params: Optional[Dict[str, str]] = None,
                       json: Any = None, prefer: Optional[str] = None) -> Any:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                     transport=self._transport) as client:
            try:
                r = await client.request(method, f"/rest/v1/{table}", params=params,
                                         json=json, headers=self._headers(prefer))
            except httpx.HTTPError as e:
                logger.error("%s: %s failed: %s", table, method, e)
                raise StoreError(f"{table}: {e}") from e

        if r.status_code >= 400:
            message = _error_message(r)
            logger.error("%s: %s rejected: %s", table, method, message)
            raise StoreError(f"{table}: {message}")
        if not r.content:
            return None
        return r.json()

    async def _select(self, table, order_by):
        rows = await self._request("GET", table, params={"select": "*", "order": f"{order_by}.asc"})
        return rows or []

    async def _insert(self, table, payload):
        rows = await self._request("POST", table, json=[payload], prefer="return=representation")
        if not rows:
            raise StoreError(f"{table}: insert returned no row")
        return rows[0]

    async def _update(self, table, record_id, changes):
        rows = await self._request("PATCH", table, params={"id": f"eq.{record_id}"},
                                   json=changes, prefer="return=representation")
        if not rows:
            raise StoreError(f"{table}: no record with id {record_id}", status_code=404)
        return rows[0]

    async def _delete(self, table, record_id):
        await self._request("DELETE", table, params={"id": f"eq.{record_id}"})
