"""
Seed the store with an admin account and a small demo catalog.

Safe to re-run: existing accounts, categories (by slug) and products
(by SKU) are left untouched.

Run from the backend/ directory:
    python scripts/seed_store.py
"""
import asyncio
import os
import sys

# Add backend/ to path so we can import the app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from config import settings
from database import async_session, init_db
from db_models import Category, Product
from domain.enums import ProductCondition, UserRole
from services import auth_service, catalog_service

CATEGORIES = [
    {"name": "Laptops", "description": "Refurbished and pre-owned notebooks"},
    {"name": "Smartphones", "description": "Unlocked phones, tested and graded"},
    {"name": "Tablets", "description": "iPads and Android tablets"},
    {"name": "Audio", "description": "Headphones, earbuds and speakers"},
]

PRODUCTS = [
    {
        "category": "laptops",
        "name": "MacBook Pro 14\" M1 Pro",
        "description": "16GB RAM, 512GB SSD. Light wear on the lid, battery health 92%.",
        "price": 1299.0,
        "original_price": 1999.0,
        "brand": "Apple",
        "condition": ProductCondition.EXCELLENT,
        "stock_count": 4,
        "sku": "APL-MBP14-M1P",
        "images": ["https://images.techvault.example/mbp14.jpg"],
        "specifications": {"CPU": "Apple M1 Pro", "RAM": "16GB", "Storage": "512GB SSD"},
        "rating": 4.8,
        "review_count": 37,
        "featured": True,
    },
    {
        "category": "laptops",
        "name": "ThinkPad X1 Carbon Gen 9",
        "description": "Business ultrabook, 14\" FHD, keyboard replaced.",
        "price": 749.0,
        "original_price": 1429.0,
        "brand": "Lenovo",
        "condition": ProductCondition.REFURBISHED,
        "stock_count": 7,
        "sku": "LNV-X1C-G9",
        "images": ["https://images.techvault.example/x1c.jpg"],
        "specifications": {"CPU": "Intel i7-1165G7", "RAM": "16GB", "Storage": "512GB SSD"},
        "rating": 4.5,
        "review_count": 18,
        "featured": False,
    },
    {
        "category": "smartphones",
        "name": "iPhone 13 128GB",
        "description": "Unlocked, minor scuffs on the frame, screen flawless.",
        "price": 449.0,
        "original_price": 799.0,
        "brand": "Apple",
        "condition": ProductCondition.GOOD,
        "stock_count": 12,
        "sku": "APL-IP13-128",
        "images": ["https://images.techvault.example/ip13.jpg"],
        "specifications": {"Storage": "128GB", "Color": "Midnight"},
        "rating": 4.6,
        "review_count": 64,
        "featured": True,
    },
    {
        "category": "smartphones",
        "name": "Pixel 7",
        "description": "Visible wear on the back glass; fully functional.",
        "price": 279.0,
        "original_price": 599.0,
        "brand": "Google",
        "condition": ProductCondition.FAIR,
        "stock_count": 3,
        "sku": "GGL-PX7-128",
        "images": ["https://images.techvault.example/px7.jpg"],
        "specifications": {"Storage": "128GB", "Color": "Obsidian"},
        "rating": 4.2,
        "review_count": 11,
        "featured": False,
    },
    {
        "category": "tablets",
        "name": "iPad Air (5th gen)",
        "description": "64GB Wi-Fi, includes charger.",
        "price": 389.0,
        "original_price": 599.0,
        "brand": "Apple",
        "condition": ProductCondition.EXCELLENT,
        "stock_count": 0,
        "sku": "APL-IPAD-AIR5",
        "images": ["https://images.techvault.example/ipadair5.jpg"],
        "specifications": {"Storage": "64GB", "Chip": "M1"},
        "rating": 4.7,
        "review_count": 22,
        "featured": False,
    },
    {
        "category": "audio",
        "name": "Sony WH-1000XM4",
        "description": "Noise-cancelling headphones, new ear pads fitted.",
        "price": 179.0,
        "original_price": 349.0,
        "brand": "Sony",
        "condition": ProductCondition.REFURBISHED,
        "stock_count": 9,
        "sku": "SNY-WH1000XM4",
        "images": ["https://images.techvault.example/xm4.jpg"],
        "specifications": {"Battery": "30h", "Connectivity": "Bluetooth 5.0"},
        "rating": 4.7,
        "review_count": 53,
        "featured": True,
    },
]


async def seed():
    await init_db()

    async with async_session() as db:
        if await auth_service.get_user_by_email(db, settings.admin_email):
            print(f"✅ Admin {settings.admin_email} already exists")
        else:
            await auth_service.register_user(
                db,
                name="Admin User",
                email=settings.admin_email,
                password=settings.admin_password,
                role=UserRole.ADMIN.value,
            )
            print(f"👤 Created admin {settings.admin_email}")

        by_slug: dict[str, int] = {}
        for entry in CATEGORIES:
            res = await db.execute(select(Category).where(Category.name == entry["name"]))
            category = res.scalar_one_or_none()
            if not category:
                category = await catalog_service.create_category(db, **entry)
                print(f"📁 Created category {category.slug}")
            by_slug[category.slug] = category.id

        for entry in PRODUCTS:
            fields = dict(entry)
            category_id = by_slug[fields.pop("category")]
            fields["condition"] = fields["condition"].value
            res = await db.execute(select(Product.id).where(Product.sku == fields["sku"]))
            if res.scalar_one_or_none() is not None:
                continue
            product = await catalog_service.create_product(db, category_id=category_id, **fields)
            print(f"📦 Created product {product.sku}")

        await db.commit()

    print("🌱 Seed complete")


if __name__ == "__main__":
    asyncio.run(seed())
