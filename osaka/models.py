# osaka/models.py
from pydantic import BaseModel
from typing import Literal, Optional


# ---------------------------
# Stored records
# ---------------------------
class Product(BaseModel):
    id: str
    name: str
    category: str
    size: str
    price: int
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True


class HeroSlide(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    image_url: str
    display_order: int = 0
    is_active: bool = True


class ProductType(BaseModel):
    id: str
    name: str


# ---------------------------
# Form states (one tagged value per record kind)
# ---------------------------
class ProductForm(BaseModel):
    kind: Literal["product"] = "product"
    category: str = ""
    model: str = ""
    product_type: str = ""
    price: Optional[int] = None
    description: str = ""
    image_url: Optional[str] = None
    is_active: bool = True


class HeroSlideForm(BaseModel):
    kind: Literal["hero_slide"] = "hero_slide"
    title: str = ""
    description: str = ""
    image_url: str = ""
    display_order: int = 0
    is_active: bool = True


class ProductTypeForm(BaseModel):
    kind: Literal["product_type"] = "product_type"
    name: str = ""
