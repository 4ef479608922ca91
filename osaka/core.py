from pydantic import BaseModel
from typing import Any, Dict, List, Tuple

from .catalog import CATEGORY_CONFIG


class LoginIn(BaseModel):
    password: str


class ToggleIn(BaseModel):
    # state currently displayed; the stored value becomes its negation
    is_active: bool


class ProductTypeIn(BaseModel):
    name: str


class CategoryOut(BaseModel):
    category: str
    size: str
    models: List[str]
    requires_type: bool


def _make_category_dict(category: str) -> Dict[str, Any]:
    config = CATEGORY_CONFIG[category]
    return {
        "category": category,
        "size": config.size,
        "models": list(config.models),
        "requires_type": config.has_types,
    }


def _make_choices_dict(category: str, pairs: List[Tuple[str, str]], types: List[str]) -> Dict[str, Any]:
    return {
        "category": category,
        "models": list(CATEGORY_CONFIG[category].models),
        "types": types,
        "combinations": [{"model": m, "product_type": t} for m, t in pairs],
    }
