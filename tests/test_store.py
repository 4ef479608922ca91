# tests/test_store.py
import asyncio
import json

import httpx
import pytest

from osaka.database import MemoryStore
from osaka.errors import StoreError
from osaka.store import HERO_SLIDES, PRODUCT_TYPES, PRODUCTS, SupabaseStore

PRODUCT_ROW = {"id": "p1", "name": "Google TV - Android", "category": "43 inch", "size": '43"',
               "price": 38500, "description": None, "image_url": None, "is_active": True}


def supabase(handler):
    return SupabaseStore("https://proj.supabase.co/", "service-key", transport=httpx.MockTransport(handler))


# ---------------------------
# Supabase (PostgREST)
# ---------------------------
def test_list_orders_ascending_and_sends_keys():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json=[PRODUCT_ROW])

    rows = asyncio.run(supabase(handler).table(PRODUCTS).list())
    request = seen["request"]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/products"
    assert request.url.params["select"] == "*"
    assert request.url.params["order"] == "category.asc"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"
    assert rows[0].name == "Google TV - Android"


def test_insert_asks_for_representation():
    seen = {}

    def handler(request):
        seen["request"] = request
        body = json.loads(request.content)
        return httpx.Response(201, json=[{**body[0], "id": "t1"}])

    record = asyncio.run(supabase(handler).table(PRODUCT_TYPES).insert({"name": "Android"}))
    assert seen["request"].method == "POST"
    assert seen["request"].headers["prefer"] == "return=representation"
    assert record.id == "t1" and record.name == "Android"


def test_update_filters_by_id():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json=[{**PRODUCT_ROW, "is_active": False}])

    record = asyncio.run(supabase(handler).table(PRODUCTS).update("p1", {"is_active": False}))
    assert seen["request"].method == "PATCH"
    assert seen["request"].url.params["id"] == "eq.p1"
    assert json.loads(seen["request"].content) == {"is_active": False}
    assert record.is_active is False


def test_update_of_missing_row_is_404():
    store = supabase(lambda r: httpx.Response(200, json=[]))
    with pytest.raises(StoreError) as exc:
        asyncio.run(store.table(PRODUCTS).update("gone", {"price": 1}))
    assert exc.value.status_code == 404


def test_delete_filters_by_id():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(204)

    asyncio.run(supabase(handler).table(HERO_SLIDES).delete("s1"))
    assert seen["request"].method == "DELETE"
    assert seen["request"].url.path == "/rest/v1/hero_slides"
    assert seen["request"].url.params["id"] == "eq.s1"


def test_server_error_becomes_store_error():
    store = supabase(lambda r: httpx.Response(500, json={"message": "boom"}))
    with pytest.raises(StoreError) as exc:
        asyncio.run(store.table(PRODUCTS).list())
    assert "boom" in str(exc.value)
    assert exc.value.status_code is None


def test_unreachable_store_becomes_store_error():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(StoreError):
        asyncio.run(supabase(handler).table(PRODUCTS).list())


def test_malformed_row_becomes_store_error():
    store = supabase(lambda r: httpx.Response(200, json=[{"id": "p1", "name": "no price"}]))
    with pytest.raises(StoreError):
        asyncio.run(store.table(PRODUCTS).list())


# ---------------------------
# Memory backend
# ---------------------------
def test_memory_store_orders_and_copies():
    store = MemoryStore(tables={"products": {}, "hero_slides": {}, "product_types": {}})
    slides = store.table(HERO_SLIDES)

    async def scenario():
        for title, order in (("b", 2), ("a", 0), ("c", 1)):
            await slides.insert({"title": title, "image_url": "/x.jpg", "display_order": order})
        rows = await slides.list()
        rows[0].title = "changed"
        return rows, await slides.list()

    rows, again = asyncio.run(scenario())
    assert [s.title for s in again] == ["a", "c", "b"]
    assert again[0].title == "a"


def test_memory_store_unknown_table():
    store = MemoryStore(tables={})
    with pytest.raises(StoreError):
        asyncio.run(store.table(PRODUCTS).list())
