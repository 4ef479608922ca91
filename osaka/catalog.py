# osaka/catalog.py
"""
Catalog composition.

Two configuration sources meet here and nowhere else:

  * ``CATEGORY_CONFIG``: the static category -> (size, base models, has types)
    table, fixed at import time.
  * the product types fetched from the ``product_types`` table at run time.

Everything in this module is pure: no I/O, no logging side effects.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import InvalidCategory
from .models import HeroSlideForm, Product, ProductForm, ProductType

SEPARATOR = " - "


@dataclass(frozen=True)
class CategoryConfig:
    size: str
    models: Tuple[str, ...]
    has_types: bool


# Order here is the section order of the public catalog.
CATEGORY_CONFIG: Mapping[str, CategoryConfig] = MappingProxyType({
    "24 inch": CategoryConfig(size='24"', models=("Smart Frameless", "Basic Frameless"), has_types=False),
    "32 inch": CategoryConfig(size='32"', models=("Gold Series", "Smart Frameless", "Google TV"), has_types=True),
    "43 inch": CategoryConfig(size='43"', models=("Gold Series", "Smart Frameless", "Google TV"), has_types=True),
    "50 inch": CategoryConfig(size='50"', models=("Google TV", "4K UHD Smart"), has_types=True),
    "65 inch": CategoryConfig(size='65"', models=("Google TV", "4K UHD Smart"), has_types=False),
})

CATEGORIES: Tuple[str, ...] = tuple(CATEGORY_CONFIG)


def _config(category: str) -> CategoryConfig:
    try:
        return CATEGORY_CONFIG[category]
    except KeyError:
        raise InvalidCategory(category) from None


def size_for_category(category: str) -> str:
    return _config(category).size


def models_for_category(category: str) -> List[str]:
    return list(_config(category).models)


def requires_type(category: str) -> bool:
    return _config(category).has_types


def type_choices(category: str, product_types: Iterable[ProductType]) -> List[str]:
    """Type names selectable for ``category``; empty when the category has no variants."""
    if not requires_type(category):
        return []
    return [t.name for t in product_types]


def combinations(category: str, product_types: Iterable[ProductType]) -> List[Tuple[str, str]]:
    """Every selectable (model, type) pair for ``category``.

    Categories without type variants yield ``(model, "")`` once per model.
    """
    if not requires_type(category):
        return [(m, "") for m in models_for_category(category)]
    types = type_choices(category, product_types)
    return [(m, t) for m in models_for_category(category) for t in types]


# ---------------------------
# Name composition
# ---------------------------
def compose_name(model: str, product_type: str, category: str) -> str:
    if not requires_type(category) or not product_type:
        return model
    return f"{model}{SEPARATOR}{product_type}"


def decompose_name(name: str, category: str) -> Tuple[str, str]:
    """Split a stored name back into (model, type).

    Splits on the first separator only, so a type that itself contains the
    separator survives intact. A name without a separator is all model.
    """
    if not requires_type(category):
        return name, ""
    model, sep, product_type = name.partition(SEPARATOR)
    if not sep:
        return name, ""
    return model, product_type


# ---------------------------
# Validation
# ---------------------------
def validate_product(form: ProductForm) -> List[str]:
    violations: List[str] = []
    category_ok = False
    if not form.category:
        violations.append("category_required")
    elif form.category not in CATEGORY_CONFIG:
        violations.append("category_invalid")
    else:
        category_ok = True

    if not form.model.strip():
        violations.append("model_required")
    if category_ok and requires_type(form.category) and not form.product_type.strip():
        violations.append("type_required")

    if form.price is None:
        violations.append("price_required")
    elif form.price <= 0:
        violations.append("price_not_positive")
    return violations


def validate_type_choice(form: ProductForm, product_types: Iterable[ProductType]) -> List[str]:
    """A chosen type must be one of the stored product types (ignoring case)."""
    if form.category not in CATEGORY_CONFIG or not requires_type(form.category):
        return []
    chosen = form.product_type.strip().casefold()
    if not chosen or chosen in {name.casefold() for name in type_choices(form.category, product_types)}:
        return []
    return ["type_unknown"]


def validate_hero_slide(form: HeroSlideForm) -> List[str]:
    violations = []
    if not form.title.strip():
        violations.append("title_required")
    if not form.image_url.strip():
        violations.append("image_required")
    return violations


def validate_type_name(name: str, existing: Iterable[ProductType]) -> List[str]:
    name = name.strip()
    if not name:
        return ["name_required"]
    folded = name.casefold()
    if any(t.name.casefold() == folded for t in existing):
        return ["type_duplicate"]
    return []


# ---------------------------
# Form <-> record
# ---------------------------
def product_payload(form: ProductForm) -> Dict[str, Any]:
    """Full insert payload for a validated form (store-assigned fields excluded)."""
    return {
        "name": compose_name(form.model.strip(), form.product_type.strip(), form.category),
        "category": form.category,
        "size": size_for_category(form.category),
        "price": form.price,
        "description": form.description,
        "image_url": form.image_url or None,
        "is_active": form.is_active,
    }


def form_from_product(product: Product) -> ProductForm:
    model, product_type = decompose_name(product.name, product.category) \
        if product.category in CATEGORY_CONFIG else (product.name, "")
    return ProductForm(
        category=product.category,
        model=model,
        product_type=product_type,
        price=product.price,
        description=product.description or "",
        image_url=product.image_url,
        is_active=product.is_active,
    )


def empty_product_form(category: Optional[str] = None) -> ProductForm:
    return ProductForm(category=category or "")
