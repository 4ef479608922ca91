# osaka/views.py
from typing import Dict, Iterable, List

from pydantic import BaseModel

from .catalog import CATEGORY_CONFIG
from .models import HeroSlide, Product


class CatalogSection(BaseModel):
    category: str
    size: str
    products: List[Product]


class DashboardStats(BaseModel):
    total: int
    active: int
    inactive: int


def catalog_sections(products: Iterable[Product]) -> List[CatalogSection]:
    """Active products grouped by category.

    Sections follow CATEGORY_CONFIG order; products keep the order the store
    returned them in. Empty categories are left out.
    """
    grouped: Dict[str, List[Product]] = {c: [] for c in CATEGORY_CONFIG}
    for p in products:
        if p.is_active and p.category in grouped:
            grouped[p.category].append(p)
    return [
        CatalogSection(category=c, size=CATEGORY_CONFIG[c].size, products=items)
        for c, items in grouped.items() if items
    ]


def active_slides(slides: Iterable[HeroSlide]) -> List[HeroSlide]:
    return sorted((s for s in slides if s.is_active), key=lambda s: s.display_order)


def dashboard_stats(products: Iterable[Product]) -> DashboardStats:
    products = list(products)
    active = sum(1 for p in products if p.is_active)
    return DashboardStats(total=len(products), active=active, inactive=len(products) - active)


def format_price(price: int) -> str:
    return f"৳ {price:,}"
