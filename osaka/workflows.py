# osaka/workflows.py
"""
Admin editing workflows.

One workflow object per record kind and per editing surface. Each moves
through ``idle -> editing -> validating -> persisting -> idle``; a rejected
form goes back to ``editing`` and so does a failed write. ``rows`` is always
the result of the last successful ``list()``: writes never patch it in place,
every successful write is followed by exactly one full re-list instead.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from . import catalog
from .errors import StoreError, UploadError, ValidationError
from .models import HeroSlideForm, ProductForm, ProductTypeForm
from .storage import ImageFile, ImageUploader
from .store import HERO_SLIDES, PRODUCT_TYPES, PRODUCTS, RecordStore, TableSpec

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    VALIDATING = "validating"
    PERSISTING = "persisting"


def _differs(old: Any, new: Any) -> bool:
    # Stores hand back NULL where forms hold "".
    if isinstance(old, (str, type(None))) and isinstance(new, (str, type(None))):
        return (old or "") != (new or "")
    return old != new


class RecordWorkflow:
    spec: TableSpec

    def __init__(self, store: RecordStore):
        self.table = store.table(self.spec)
        self.rows: List[Any] = []
        self.state = EditorState.IDLE
        self.form: Any = None
        self.editing_id: Optional[str] = None
        self.original: Dict[str, Any] = {}
        self.last_error: Optional[str] = None

    # Per-kind hooks
    def empty_form(self):
        raise NotImplementedError

    def form_for(self, record):
        raise NotImplementedError

    def validate(self, form) -> List[str]:
        raise NotImplementedError

    def payload(self, form) -> Dict[str, Any]:
        raise NotImplementedError

    # ---------------------------
    # Reads
    # ---------------------------
    async def refresh(self) -> List[Any]:
        try:
            rows = await self.table.list()
        except StoreError as e:
            self.last_error = str(e)
            raise
        self.rows = rows
        return rows

    def find(self, record_id: str):
        return next((r for r in self.rows if r.id == record_id), None)

    # ---------------------------
    # Editing surface
    # ---------------------------
    def open_add(self):
        self.form = self.empty_form()
        self.editing_id = None
        self.original = {}
        self.last_error = None
        self.state = EditorState.EDITING
        return self.form

    def open_edit(self, record):
        self.form = self.form_for(record)
        self.editing_id = record.id
        self.original = record.model_dump(exclude={"id"})
        self.last_error = None
        self.state = EditorState.EDITING
        return self.form

    def update_form(self, **changes):
        self._require_editing()
        self.form = self.form.model_copy(update=changes)
        return self.form

    def cancel(self) -> None:
        self._close()

    def _close(self) -> None:
        self.form = None
        self.editing_id = None
        self.original = {}
        self.state = EditorState.IDLE

    def _require_editing(self) -> None:
        if self.state != EditorState.EDITING:
            raise RuntimeError(f"{self.spec.name}: no form open (state={self.state.value})")

    async def save(self) -> List[Any]:
        self._require_editing()
        self.state = EditorState.VALIDATING
        violations = self.validate(self.form)
        if violations:
            self.state = EditorState.EDITING
            self.last_error = ", ".join(violations)
            logger.info("%s: form rejected: %s", self.spec.name, violations)
            raise ValidationError(violations)

        payload = self.payload(self.form)
        if self.editing_id is not None:
            changes = {k: v for k, v in payload.items() if _differs(self.original.get(k), v)}
            if not changes:
                logger.debug("%s: nothing changed on %s", self.spec.name, self.editing_id)
                self._close()
                return self.rows

        self.state = EditorState.PERSISTING
        try:
            if self.editing_id is None:
                record = await self.table.insert(payload)
            else:
                record = await self.table.update(self.editing_id, changes)
        except StoreError as e:
            self.state = EditorState.EDITING
            self.last_error = str(e)
            raise

        logger.info("%s: saved %s", self.spec.name, record.id)
        self._close()
        return await self.refresh()

    # ---------------------------
    # One-step actions
    # ---------------------------
    async def delete(self, record_id: str, confirmed: bool) -> bool:
        if not confirmed:
            logger.info("%s: delete of %s not confirmed", self.spec.name, record_id)
            return False
        try:
            await self.table.delete(record_id)
        except StoreError as e:
            self.last_error = str(e)
            raise
        logger.info("%s: deleted %s", self.spec.name, record_id)
        await self.refresh()
        return True


class ActivatableWorkflow(RecordWorkflow):
    async def toggle_active(self, record_id: str, current: bool) -> List[Any]:
        try:
            await self.table.update(record_id, {"is_active": not current})
        except StoreError as e:
            self.last_error = str(e)
            raise
        return await self.refresh()

    async def attach_image(self, uploader: ImageUploader, image: ImageFile) -> str:
        """Upload ``image`` and record its URL in the open form.

        A failed upload leaves the form exactly as it was, so the rest of it
        can still be edited and saved.
        """
        self._require_editing()
        try:
            url = await uploader.upload(image)
        except (ValidationError, UploadError) as e:
            self.last_error = str(e)
            raise
        self.form = self.form.model_copy(update={"image_url": url})
        return url

    def remove_image(self):
        self._require_editing()
        self.form = self.form.model_copy(update={"image_url": self.empty_form().image_url})
        return self.form


class ProductWorkflow(ActivatableWorkflow):
    spec = PRODUCTS

    def __init__(self, store: RecordStore):
        super().__init__(store)
        self.types_table = store.table(PRODUCT_TYPES)
        self.product_types: List[Any] = []
        self._opened_type = ""

    def empty_form(self):
        return catalog.empty_product_form()

    def form_for(self, record):
        return catalog.form_from_product(record)

    def open_add(self):
        self._opened_type = ""
        return super().open_add()

    def open_edit(self, record):
        form = super().open_edit(record)
        self._opened_type = form.product_type
        return form

    async def load_types(self) -> List[Any]:
        self.product_types = await self.types_table.list()
        return self.product_types

    async def choices(self, category: str) -> List[Tuple[str, str]]:
        """Selectable (model, type) pairs for ``category`` against the stored types."""
        catalog.size_for_category(category)
        return catalog.combinations(category, await self.load_types())

    def _type_changed(self, form: ProductForm) -> bool:
        # A record keeps the type it was saved with even after that type is deleted.
        return form.product_type.strip() != self._opened_type.strip()

    def validate(self, form: ProductForm) -> List[str]:
        violations = catalog.validate_product(form)
        if not violations and self._type_changed(form):
            violations = catalog.validate_type_choice(form, self.product_types)
        return violations

    async def save(self) -> List[Any]:
        self._require_editing()
        if self._type_changed(self.form) and self.form.category in catalog.CATEGORY_CONFIG \
                and catalog.requires_type(self.form.category):
            try:
                await self.load_types()
            except StoreError as e:
                self.last_error = str(e)
                raise
        return await super().save()

    def payload(self, form: ProductForm) -> Dict[str, Any]:
        return catalog.product_payload(form)

    def choose_category(self, category: str) -> ProductForm:
        # Model and type choices depend on the category, so both start over.
        catalog.size_for_category(category)
        return self.update_form(category=category, model="", product_type="")

    def preview_name(self) -> str:
        self._require_editing()
        if self.form.category not in catalog.CATEGORY_CONFIG:
            return self.form.model
        return catalog.compose_name(self.form.model, self.form.product_type, self.form.category)


class HeroSlideWorkflow(ActivatableWorkflow):
    spec = HERO_SLIDES

    def empty_form(self):
        return HeroSlideForm()

    def form_for(self, record):
        return HeroSlideForm(
            title=record.title,
            description=record.description or "",
            image_url=record.image_url,
            display_order=record.display_order,
            is_active=record.is_active,
        )

    def validate(self, form: HeroSlideForm) -> List[str]:
        return catalog.validate_hero_slide(form)

    def payload(self, form: HeroSlideForm) -> Dict[str, Any]:
        return {
            "title": form.title.strip(),
            "description": form.description,
            "image_url": form.image_url.strip(),
            "display_order": form.display_order,
            "is_active": form.is_active,
        }


class ProductTypeWorkflow(RecordWorkflow):
    spec = PRODUCT_TYPES

    def empty_form(self):
        return ProductTypeForm()

    def form_for(self, record):
        return ProductTypeForm(name=record.name)

    def validate(self, form: ProductTypeForm) -> List[str]:
        others = [t for t in self.rows if t.id != self.editing_id]
        return catalog.validate_type_name(form.name, others)

    def payload(self, form: ProductTypeForm) -> Dict[str, Any]:
        return {"name": form.name.strip()}

    async def add_type(self, name: str) -> List[Any]:
        """Append a type; duplicates are checked case-insensitively against ``rows``."""
        self.open_add()
        self.update_form(name=name)
        return await self.save()

    async def delete_type(self, record_id: str, confirmed: bool) -> bool:
        # Products keep the names they were composed with.
        return await self.delete(record_id, confirmed)
