# osaka/main.py
import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import database
from .catalog import CATEGORIES, type_choices
from .config import Settings, get_settings
from .core import CategoryOut, LoginIn, ProductTypeIn, ToggleIn, _make_category_dict, _make_choices_dict
from .database import MemoryStore
from .errors import AuthError, StoreError, UploadError, ValidationError
from .models import HeroSlideForm, ProductForm
from .session import AdminSession, is_valid, login
from .storage import MAX_IMAGE_BYTES, ImageFile, MemoryObjectStore, ObjectStore, SupabaseObjectStore, uploader_for
from .store import HERO_SLIDES, PRODUCTS, RecordStore, SupabaseStore
from .views import active_slides, catalog_sections, dashboard_stats
from .workflows import HeroSlideWorkflow, ProductTypeWorkflow, ProductWorkflow, RecordWorkflow

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="OSAKA Television catalog")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Backends
# ---------------------------
def _require_supabase(settings: Settings) -> None:
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")


@lru_cache(maxsize=4)
def _store_for(settings: Settings) -> RecordStore:
    if settings.store_backend == "supabase":
        _require_supabase(settings)
        return SupabaseStore(settings.supabase_url, settings.supabase_key)
    return MemoryStore()


@lru_cache(maxsize=4)
def _object_store_for(settings: Settings) -> ObjectStore:
    if settings.store_backend == "supabase":
        _require_supabase(settings)
        return SupabaseObjectStore(settings.supabase_url, settings.supabase_key)
    return MemoryObjectStore(settings.public_base_url)


def get_store(settings: Settings = Depends(get_settings)) -> RecordStore:
    return _store_for(settings)


def get_object_store(settings: Settings = Depends(get_settings)) -> ObjectStore:
    return _object_store_for(settings)


def require_admin(x_admin_token: Optional[str] = Header(None),
                  settings: Settings = Depends(get_settings)) -> AdminSession:
    session = AdminSession(token=x_admin_token or "")
    if not is_valid(session, settings):
        raise AuthError("admin session required")
    return session


# ---------------------------
# Error mapping
# ---------------------------
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "violations": exc.violations})


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code or 502, content={"detail": str(exc)})


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ---------------------------
# Public endpoints
# ---------------------------
@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/categories", response_model=List[CategoryOut])
async def list_categories():
    return [_make_category_dict(c) for c in CATEGORIES]


@app.get("/catalog")
async def public_catalog(store: RecordStore = Depends(get_store)):
    return catalog_sections(await store.table(PRODUCTS).list())


@app.get("/hero-slides")
async def public_hero_slides(store: RecordStore = Depends(get_store)):
    return active_slides(await store.table(HERO_SLIDES).list())


@app.get("/media/{bucket}/{key}")
async def media(bucket: str, key: str, object_store: ObjectStore = Depends(get_object_store)):
    found = object_store.get(bucket, key) if isinstance(object_store, MemoryObjectStore) else None
    if not found:
        raise HTTPException(status_code=404, detail="object not found")
    data, content_type = found
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "max-age=3600"})


# ---------------------------
# Helpers shared by the admin endpoints
# ---------------------------
async def _open_existing(wf: RecordWorkflow, record_id: str):
    await wf.refresh()
    record = wf.find(record_id)
    if record is None:
        raise StoreError(f"{wf.spec.name}: no record with id {record_id}", status_code=404)
    return record


async def _create(wf: RecordWorkflow, form):
    wf.open_add()
    wf.update_form(**form.model_dump(exclude={"kind"}))
    return await wf.save()


async def _update(wf: RecordWorkflow, record_id: str, form):
    wf.open_edit(await _open_existing(wf, record_id))
    wf.update_form(**form.model_dump(exclude={"kind"}))
    return await wf.save()


async def _delete(wf: RecordWorkflow, record_id: str, confirm: bool):
    if not confirm:
        raise HTTPException(status_code=400, detail="delete requires confirm=true")
    await wf.delete(record_id, confirmed=True)
    return wf.rows


# ---------------------------
# Admin: session and dashboard
# ---------------------------
@app.post("/admin/login")
async def admin_login(payload: LoginIn, settings: Settings = Depends(get_settings)):
    session = login(payload.password, settings)
    return {"token": session.token}


@app.get("/admin/stats")
async def admin_stats(store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return dashboard_stats(await store.table(PRODUCTS).list())


# ---------------------------
# Admin: products
# ---------------------------
@app.get("/admin/categories/{category}/choices")
async def admin_category_choices(category: str, store: RecordStore = Depends(get_store),
                                 _: AdminSession = Depends(require_admin)):
    wf = ProductWorkflow(store)
    pairs = await wf.choices(category)
    return _make_choices_dict(category, pairs, type_choices(category, wf.product_types))


@app.get("/admin/products")
async def admin_list_products(store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return await ProductWorkflow(store).refresh()


@app.get("/admin/products/{product_id}/form")
async def admin_product_form(product_id: str, store: RecordStore = Depends(get_store),
                             _: AdminSession = Depends(require_admin)):
    wf = ProductWorkflow(store)
    return wf.open_edit(await _open_existing(wf, product_id))


@app.post("/admin/products", status_code=201)
async def admin_add_product(form: ProductForm, store: RecordStore = Depends(get_store),
                            _: AdminSession = Depends(require_admin)):
    return await _create(ProductWorkflow(store), form)


@app.put("/admin/products/{product_id}")
async def admin_update_product(product_id: str, form: ProductForm, store: RecordStore = Depends(get_store),
                               _: AdminSession = Depends(require_admin)):
    return await _update(ProductWorkflow(store), product_id, form)


@app.post("/admin/products/{product_id}/toggle")
async def admin_toggle_product(product_id: str, payload: ToggleIn, store: RecordStore = Depends(get_store),
                               _: AdminSession = Depends(require_admin)):
    return await ProductWorkflow(store).toggle_active(product_id, payload.is_active)


@app.delete("/admin/products/{product_id}")
async def admin_delete_product(product_id: str, confirm: bool = Query(False),
                               store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return await _delete(ProductWorkflow(store), product_id, confirm)


# ---------------------------
# Admin: hero slides
# ---------------------------
@app.get("/admin/hero-slides")
async def admin_list_slides(store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return await HeroSlideWorkflow(store).refresh()


@app.get("/admin/hero-slides/{slide_id}/form")
async def admin_slide_form(slide_id: str, store: RecordStore = Depends(get_store),
                           _: AdminSession = Depends(require_admin)):
    wf = HeroSlideWorkflow(store)
    return wf.open_edit(await _open_existing(wf, slide_id))


@app.post("/admin/hero-slides", status_code=201)
async def admin_add_slide(form: HeroSlideForm, store: RecordStore = Depends(get_store),
                          _: AdminSession = Depends(require_admin)):
    return await _create(HeroSlideWorkflow(store), form)


@app.put("/admin/hero-slides/{slide_id}")
async def admin_update_slide(slide_id: str, form: HeroSlideForm, store: RecordStore = Depends(get_store),
                             _: AdminSession = Depends(require_admin)):
    return await _update(HeroSlideWorkflow(store), slide_id, form)


@app.post("/admin/hero-slides/{slide_id}/toggle")
async def admin_toggle_slide(slide_id: str, payload: ToggleIn, store: RecordStore = Depends(get_store),
                             _: AdminSession = Depends(require_admin)):
    return await HeroSlideWorkflow(store).toggle_active(slide_id, payload.is_active)


@app.delete("/admin/hero-slides/{slide_id}")
async def admin_delete_slide(slide_id: str, confirm: bool = Query(False),
                             store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return await _delete(HeroSlideWorkflow(store), slide_id, confirm)


# ---------------------------
# Admin: product types
# ---------------------------
@app.get("/admin/product-types")
async def admin_list_types(store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return await ProductTypeWorkflow(store).refresh()


@app.post("/admin/product-types", status_code=201)
async def admin_add_type(payload: ProductTypeIn, store: RecordStore = Depends(get_store),
                         _: AdminSession = Depends(require_admin)):
    wf = ProductTypeWorkflow(store)
    await wf.refresh()
    return await wf.add_type(payload.name)


@app.delete("/admin/product-types/{type_id}")
async def admin_delete_type(type_id: str, confirm: bool = Query(False),
                            store: RecordStore = Depends(get_store), _: AdminSession = Depends(require_admin)):
    return await _delete(ProductTypeWorkflow(store), type_id, confirm)


# ---------------------------
# Admin: uploads
# ---------------------------
@app.post("/admin/uploads/{kind}")
async def admin_upload(kind: str, file: UploadFile = File(...),
                       object_store: ObjectStore = Depends(get_object_store),
                       _: AdminSession = Depends(require_admin)):
    try:
        uploader = uploader_for(kind, object_store)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"unknown upload kind {kind!r}")
    # One byte past the limit is enough to reject the file as too large.
    image = ImageFile(filename=file.filename or "upload", content_type=file.content_type or "",
                      data=await file.read(MAX_IMAGE_BYTES + 1))
    return {"url": await uploader.upload(image)}


# ---------------------------
# Utility: reset (memory backend only, for tests/demo)
# ---------------------------
@app.post("/admin/reset")
async def admin_reset(settings: Settings = Depends(get_settings),
                      object_store: ObjectStore = Depends(get_object_store),
                      _: AdminSession = Depends(require_admin)):
    if settings.store_backend != "memory":
        raise HTTPException(status_code=404, detail="reset is only available on the memory backend")
    database.reset()
    if isinstance(object_store, MemoryObjectStore):
        object_store.objects.clear()
    return {"status": "reset"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("osaka.main:app", host="0.0.0.0", port=get_settings().port, log_level="info")
