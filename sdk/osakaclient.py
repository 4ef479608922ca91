# sdk/osakaclient.py
import mimetypes
import os
from urllib.parse import quote
from typing import Any, Dict, Optional

import httpx
import requests


class OsakaClient:
    def __init__(self, base_url: str = "http://localhost:8085", token: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        self.token = None
        if token:
            self._use_token(token)

    def _use_token(self, token: str):
        self.token = token
        self.session.headers.update({"X-Admin-Token": token})

    def _get(self, path: str, **kwargs):
        r = self.session.get(f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    def _send(self, method: str, path: str, **kwargs):
        r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    # Session
    def login(self, password: str):
        data = self._send("POST", "/admin/login", json={"password": password})
        self._use_token(data["token"])
        return data

    def logout(self):
        self.token = None
        self.session.headers.pop("X-Admin-Token", None)

    def reset(self):
        return self._send("POST", "/admin/reset")

    # Public site
    def catalog(self):
        return self._get("/catalog")

    def hero_slides(self):
        return self._get("/hero-slides")

    def categories(self):
        return self._get("/categories")

    def stats(self):
        return self._get("/admin/stats")

    # Products
    def choices(self, category: str):
        return self._get(f"/admin/categories/{quote(category)}/choices")

    def list_products(self):
        return self._get("/admin/products")

    def product_form(self, product_id: str):
        return self._get(f"/admin/products/{product_id}/form")

    def add_product(self, form: Dict[str, Any]):
        return self._send("POST", "/admin/products", json=form)

    def update_product(self, product_id: str, form: Dict[str, Any]):
        return self._send("PUT", f"/admin/products/{product_id}", json=form)

    def toggle_product(self, product_id: str, is_active: bool):
        return self._send("POST", f"/admin/products/{product_id}/toggle", json={"is_active": is_active})

    def delete_product(self, product_id: str):
        return self._send("DELETE", f"/admin/products/{product_id}", params={"confirm": "true"})

    # Hero slides
    def list_slides(self):
        return self._get("/admin/hero-slides")

    def slide_form(self, slide_id: str):
        return self._get(f"/admin/hero-slides/{slide_id}/form")

    def add_slide(self, form: Dict[str, Any]):
        return self._send("POST", "/admin/hero-slides", json=form)

    def update_slide(self, slide_id: str, form: Dict[str, Any]):
        return self._send("PUT", f"/admin/hero-slides/{slide_id}", json=form)

    def toggle_slide(self, slide_id: str, is_active: bool):
        return self._send("POST", f"/admin/hero-slides/{slide_id}/toggle", json={"is_active": is_active})

    def delete_slide(self, slide_id: str):
        return self._send("DELETE", f"/admin/hero-slides/{slide_id}", params={"confirm": "true"})

    # Product types
    def list_types(self):
        return self._get("/admin/product-types")

    def add_type(self, name: str):
        return self._send("POST", "/admin/product-types", json={"name": name})

    def delete_type(self, type_id: str):
        return self._send("DELETE", f"/admin/product-types/{type_id}", params={"confirm": "true"})

    # Uploads
    def upload_image(self, kind: str, path: str) -> str:
        content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        with open(path, "rb") as fh:
            files = {"file": (os.path.basename(path), fh, content_type)}
            return self._send("POST", f"/admin/uploads/{kind}", files=files)["url"]

    # Async update (example)
    async def update_product_async(self, product_id: str, form: Dict[str, Any]):
        headers = {"X-Admin-Token": self.token} if self.token else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.put(f"{self.base_url}/admin/products/{product_id}", json=form, headers=headers)
            return r


if __name__ == "__main__":
    import argparse
    import json

    parser = argparse.ArgumentParser(description="OSAKA catalog client")
    parser.add_argument("--url", default=os.getenv("OSAKA_API_URL", "http://127.0.0.1:8085"))
    parser.add_argument("--password", default=os.getenv("OSAKA_ADMIN_PASSWORD"))
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("catalog")
    subparsers.add_parser("hero-slides")
    subparsers.add_parser("categories")
    subparsers.add_parser("stats")
    subparsers.add_parser("list-products")
    subparsers.add_parser("list-types")

    ap = subparsers.add_parser("add-product")
    ap.add_argument("--category", required=True)
    ap.add_argument("--model", required=True)
    ap.add_argument("--type", dest="product_type", default="")
    ap.add_argument("--price", type=int, required=True)
    ap.add_argument("--description", default="")

    at = subparsers.add_parser("add-type")
    at.add_argument("name")

    tp = subparsers.add_parser("toggle-product")
    tp.add_argument("product_id")
    tp.add_argument("--currently-active", type=lambda v: v.lower() in ("1", "true", "yes"), default=True)

    dp = subparsers.add_parser("delete-product")
    dp.add_argument("product_id")

    up = subparsers.add_parser("upload")
    up.add_argument("kind", choices=["hero", "product"])
    up.add_argument("path")
    # ---------------------------
    # Parse and execute
    # ---------------------------
    args = parser.parse_args()
    c = OsakaClient(base_url=args.url)
    if args.password:
        c.login(args.password)

    if args.command == "catalog":
        result = c.catalog()
    elif args.command == "hero-slides":
        result = c.hero_slides()
    elif args.command == "categories":
        result = c.categories()
    elif args.command == "stats":
        result = c.stats()
    elif args.command == "list-products":
        result = c.list_products()
    elif args.command == "list-types":
        result = c.list_types()
    elif args.command == "add-product":
        result = c.add_product({"category": args.category, "model": args.model,
                                "product_type": args.product_type, "price": args.price,
                                "description": args.description})
    elif args.command == "add-type":
        result = c.add_type(args.name)
    elif args.command == "toggle-product":
        result = c.toggle_product(args.product_id, args.currently_active)
    elif args.command == "delete-product":
        result = c.delete_product(args.product_id)
    else:
        result = {"url": c.upload_image(args.kind, args.path)}
    print(json.dumps(result, indent=2, ensure_ascii=False))
