import asyncio
import os

from sdk.osakaclient import OsakaClient

# Two admins save the same product at the same moment. Nothing locks or
# merges: whichever update the store applies last is what everyone sees.


async def save_price(client, product_id, who, price):
    r = await client.update_product_async(product_id, {
        "category": "32 inch", "model": "Gold Series", "product_type": "Voice Control", "price": price,
    })
    if r.status_code == 200:
        print(f"✅ {who} saved price {price}")
    else:
        print(f"❌ {who} save failed: HTTP {r.status_code} {r.text}")


async def main():
    c = OsakaClient(base_url=os.getenv("OSAKA_API_URL", "http://127.0.0.1:8085"))
    c.login(os.getenv("OSAKA_ADMIN_PASSWORD", "osaka2026"))
    c.reset()

    c.add_type("Voice Control")
    products = c.add_product({"category": "32 inch", "model": "Gold Series",
                              "product_type": "Voice Control", "price": 21000})
    product_id = products[0]["id"]
    print(f"\n📺 Created: {products[0]}")

    print("\n⚡ Saving from two sessions at once...")
    await asyncio.gather(
        save_price(c, product_id, "alice", 19990),
        save_price(c, product_id, "bob", 22500),
    )

    final = next(p for p in c.list_products() if p["id"] == product_id)
    print(f"\n📦 Stored price after both saves: {final['price']}")


if __name__ == "__main__":
    asyncio.run(main())
