"""
Catalog service — categories and products.

Products are never hard-deleted: DELETE flips is_active so historical
order lines keep a valid product reference. `in_stock` is derived from
`stock_count` on every write.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Category, Product
from domain.enums import ProductSort
from domain.errors import ConflictError, NotFoundError, ValidationError
from utils.validators import normalize_sku, slugify

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "name": Product.name,
    "price": Product.price,
    "rating": Product.rating,
    "createdAt": Product.created_at,
}


# ==================== Categories ====================

async def _product_counts(db: AsyncSession, category_ids: list[int]) -> dict[int, int]:
    if not category_ids:
        return {}
    res = await db.execute(
        select(Product.category_id, func.count(Product.id))
        .where(Product.category_id.in_(category_ids), Product.is_active == True)
        .group_by(Product.category_id)
    )
    return {cid: n for cid, n in res.all()}


async def list_categories(
    db: AsyncSession,
    *,
    search: str | None = None,
    include_inactive: bool = False,
) -> list[tuple[Category, int]]:
    """Categories ordered by name, each paired with its active product count."""
    query = select(Category).order_by(Category.name)
    if not include_inactive:
        query = query.where(Category.is_active == True)
    if search:
        query = query.where(
            or_(
                Category.name.icontains(search, autoescape=True),
                Category.description.icontains(search, autoescape=True),
            )
        )
    res = await db.execute(query)
    categories = list(res.scalars().all())
    counts = await _product_counts(db, [c.id for c in categories])
    return [(c, counts.get(c.id, 0)) for c in categories]


async def get_category(db: AsyncSession, *, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category", str(category_id))
    return category


async def get_category_by_slug(db: AsyncSession, *, slug: str) -> Category:
    res = await db.execute(select(Category).where(Category.slug == slug.lower()))
    category = res.scalar_one_or_none()
    if not category:
        raise NotFoundError("Category", slug)
    return category


async def count_category_products(db: AsyncSession, *, category_id: int) -> int:
    counts = await _product_counts(db, [category_id])
    return counts.get(category_id, 0)


async def _ensure_category_unique(
    db: AsyncSession,
    *,
    name: str | None,
    slug: str | None,
    exclude_id: int | None = None,
) -> None:
    clauses = []
    if name is not None:
        clauses.append(func.lower(Category.name) == name.lower())
    if slug is not None:
        clauses.append(Category.slug == slug)
    if not clauses:
        return
    query = select(Category).where(or_(*clauses))
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    res = await db.execute(query.limit(1))
    clash = res.scalar_one_or_none()
    if clash:
        field = "slug" if slug is not None and clash.slug == slug else "name"
        raise ConflictError(f"Category with this {field} already exists")


async def create_category(
    db: AsyncSession,
    *,
    name: str,
    slug: str | None = None,
    description: str = "",
    image: str | None = None,
) -> Category:
    slug = slugify(slug or name)
    await _ensure_category_unique(db, name=name, slug=slug)

    category = Category(
        name=name,
        slug=slug,
        description=description or "",
        image=image,
        is_active=True,
    )
    db.add(category)
    await db.flush()
    logger.info(f"Created category '{slug}' (#{category.id})")
    return category


async def update_category(db: AsyncSession, *, category_id: int, changes: dict[str, Any]) -> Category:
    """Update only the provided fields; name/slug stay unique."""
    category = await get_category(db, category_id=category_id)

    new_name = changes.get("name")
    new_slug = slugify(changes["slug"]) if changes.get("slug") else None
    await _ensure_category_unique(
        db,
        name=new_name if new_name and new_name != category.name else None,
        slug=new_slug if new_slug and new_slug != category.slug else None,
        exclude_id=category.id,
    )

    if new_name:
        category.name = new_name
    if new_slug:
        category.slug = new_slug
    if changes.get("description") is not None:
        category.description = changes["description"]
    if "image" in changes:
        category.image = changes["image"]
    if changes.get("is_active") is not None:
        category.is_active = changes["is_active"]

    category.updated_at = datetime.utcnow()
    await db.flush()
    return category


async def delete_category(db: AsyncSession, *, category_id: int) -> Category:
    """Delete a category that no active product references."""
    category = await get_category(db, category_id=category_id)
    in_use = await count_category_products(db, category_id=category_id)
    if in_use:
        raise ConflictError(
            f"Cannot delete category {category.slug}: {in_use} active product(s) still assigned"
        )
    await db.delete(category)
    await db.flush()
    return category


# ==================== Products ====================

def _apply_stock(product: Product, stock_count: int) -> None:
    product.stock_count = stock_count
    product.in_stock = stock_count > 0


async def _load_product(db: AsyncSession, product_id: int) -> Product | None:
    """Fetch a product with its category, overwriting any stale identity-map state."""
    res = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def _sku_taken(db: AsyncSession, sku: str, exclude_id: int | None = None) -> bool:
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    res = await db.execute(query.limit(1))
    return res.scalar_one_or_none() is not None


async def list_products(
    db: AsyncSession,
    *,
    search: str | None = None,
    category_id: int | None = None,
    brand: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    condition: str | None = None,
    in_stock: bool | None = None,
    featured: bool | None = None,
    sort: str = ProductSort.CREATED_DESC.value,
    limit: int = 12,
    offset: int = 0,
) -> tuple[list[Product], int]:
    """
    Active products matching every given filter.

    Args:
        search: Case-insensitive substring of name, description or brand
        brand: Case-insensitive substring of brand
        min_price / max_price: Inclusive bounds
        in_stock / featured: Only applied when True
        sort: Field name, '-' prefix for descending

    Returns:
        (page of products, total matching count)
    """
    filters = [Product.is_active == True]

    if search:
        filters.append(
            or_(
                Product.name.icontains(search, autoescape=True),
                Product.description.icontains(search, autoescape=True),
                Product.brand.icontains(search, autoescape=True),
            )
        )
    if category_id:
        filters.append(Product.category_id == category_id)
    if brand:
        filters.append(Product.brand.icontains(brand, autoescape=True))
    if min_price is not None:
        filters.append(Product.price >= min_price)
    if max_price is not None:
        filters.append(Product.price <= max_price)
    if condition:
        filters.append(Product.condition == condition)
    if in_stock:
        filters.append(Product.in_stock == True)
    if featured:
        filters.append(Product.featured == True)

    descending = sort.startswith("-")
    column = _SORT_COLUMNS.get(sort.lstrip("-"), Product.created_at)
    order = column.desc() if descending else column.asc()

    total_res = await db.execute(select(func.count(Product.id)).where(*filters))
    total = total_res.scalar_one()

    res = await db.execute(
        select(Product)
        .where(*filters)
        .order_by(order, Product.id.desc() if descending else Product.id.asc())
        .limit(limit)
        .offset(offset)
    )
    return list(res.scalars().all()), total


async def list_active_products(db: AsyncSession) -> list[Product]:
    res = await db.execute(select(Product).where(Product.is_active == True).order_by(Product.id))
    return list(res.scalars().all())


async def get_product(db: AsyncSession, *, product_id: int, include_inactive: bool = False) -> Product:
    product = await _load_product(db, product_id)
    if not product or (not include_inactive and not product.is_active):
        raise NotFoundError("Product", str(product_id))
    return product


async def create_product(
    db: AsyncSession,
    *,
    name: str,
    description: str,
    price: float,
    category_id: int,
    brand: str,
    condition: str,
    stock_count: int,
    sku: str,
    images: list[str],
    specifications: dict | None = None,
    original_price: float | None = None,
    rating: float = 0.0,
    review_count: int = 0,
    featured: bool = False,
) -> Product:
    if not await db.get(Category, category_id):
        raise ValidationError("Category not found")

    sku = normalize_sku(sku)
    if await _sku_taken(db, sku):
        raise ValidationError("SKU already exists")

    product = Product(
        name=name,
        description=description,
        price=price,
        original_price=original_price,
        category_id=category_id,
        brand=brand,
        condition=condition,
        sku=sku,
        images=list(images),
        specifications=dict(specifications or {}),
        rating=rating,
        review_count=review_count,
        featured=featured,
        is_active=True,
    )
    _apply_stock(product, stock_count)
    db.add(product)
    await db.flush()
    logger.info(f"Created product {sku} (#{product.id})")
    return await _load_product(db, product.id)


async def update_product(db: AsyncSession, *, product_id: int, changes: dict[str, Any]) -> Product:
    """Update only the provided fields. SKU changes are checked for collisions."""
    product = await _load_product(db, product_id)
    if not product:
        raise NotFoundError("Product", str(product_id))

    changes = dict(changes)

    if changes.get("sku") is not None:
        sku = normalize_sku(changes.pop("sku"))
        if sku != product.sku and await _sku_taken(db, sku, exclude_id=product.id):
            raise ValidationError("SKU already exists")
        product.sku = sku

    if changes.get("category") is not None:
        category_id = changes.pop("category")
        if not await db.get(Category, category_id):
            raise ValidationError("Category not found")
        product.category_id = category_id

    if changes.get("stock_count") is not None:
        _apply_stock(product, changes.pop("stock_count"))

    for field in (
        "name", "description", "price", "original_price", "brand", "condition",
        "images", "specifications", "rating", "review_count", "featured",
    ):
        if field in changes and (changes[field] is not None or field == "original_price"):
            setattr(product, field, changes[field])

    product.updated_at = datetime.utcnow()
    await db.flush()
    return await _load_product(db, product.id)


async def soft_delete_product(db: AsyncSession, *, product_id: int) -> Product:
    """Soft-delete a product by setting is_active=False."""
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", str(product_id))

    product.is_active = False
    product.updated_at = datetime.utcnow()
    await db.flush()
    return product


async def adjust_stock(db: AsyncSession, *, product: Product, delta: int) -> None:
    """Apply a stock change (negative for sales) and keep in_stock in sync."""
    stock_count = product.stock_count + delta
    if stock_count < 0:
        raise ValidationError(f"Insufficient stock for {product.name}")
    _apply_stock(product, stock_count)
    await db.flush()


async def count_active_products(db: AsyncSession) -> int:
    res = await db.execute(select(func.count(Product.id)).where(Product.is_active == True))
    return res.scalar_one()
