#!/usr/bin/env python
import os

from rich import print

from sdk.osakaclient import OsakaClient


def main():
    c = OsakaClient(base_url=os.getenv("OSAKA_API_URL", "http://127.0.0.1:8085"))
    c.login(os.getenv("OSAKA_ADMIN_PASSWORD", "osaka2026"))

    # -----------------------------
    # Reset everything for demo
    # -----------------------------
    print("Resetting store...")
    c.reset()

    # -----------------------------
    # Product types
    # -----------------------------
    print("\nAdding product types...")
    for name in ("Voice Control", "Android", "Bluetooth"):
        c.add_type(name)
    print(c.list_types())

    # -----------------------------
    # Products
    # -----------------------------
    print("\nAdding products...")
    c.add_product({"category": "24 inch", "model": "Smart Frameless", "price": 15000,
                   "description": "Slim bezel, HD ready"})
    c.add_product({"category": "32 inch", "model": "Gold Series", "product_type": "Voice Control",
                   "price": 21000, "description": "Voice remote included"})
    c.add_product({"category": "43 inch", "model": "Google TV", "product_type": "Android", "price": 38500})
    products = c.add_product({"category": "65 inch", "model": "4K UHD Smart", "price": 115000})
    print(products)

    # -----------------------------
    # Hero slides
    # -----------------------------
    print("\nAdding hero slides...")
    c.add_slide({"title": "Welcome to OSAKA Television", "image_url": "/hero1.jpg",
                 "description": "Experience the best in visual entertainment", "display_order": 0})
    c.add_slide({"title": "Premium Quality TVs", "image_url": "/hero2.jpg",
                 "description": "From 24 to 65 - Find your perfect size", "display_order": 1})
    print(c.add_slide({"title": "Smart TV Technology", "image_url": "/hero3.jpg",
                       "description": "Google TV and Smart features available", "display_order": 2}))

    # -----------------------------
    # Hide one product, then look at the public site
    # -----------------------------
    hidden = next(p for p in products if p["category"] == "65 inch")
    print(f"\nHiding {hidden['name']}...")
    c.toggle_product(hidden["id"], hidden["is_active"])

    print("\nPublic catalog:")
    print(c.catalog())
    print("\nDashboard:")
    print(c.stats())


if __name__ == "__main__":
    main()
