"""
Product endpoints — paginated catalog, storefront browse, admin CRUD.

`/products/browse` is declared before `/products/{id}` so the literal path wins.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import Pagination, page_params, require_admin
from domain.constants import BROWSE_MAX_PRICE, BROWSE_MIN_PRICE, PRODUCTS_DEFAULT_LIMIT
from domain.enums import BrowseSort, ProductCondition, ProductSort
from domain.responses import paginated_response, success_response
from models import ProductCreateRequest, ProductUpdateRequest, product_payload
from services import catalog_service
from services.catalog_filter import BrowseFilters, distinct_brands, filter_products
from utils.validators import validated_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
async def list_products(
    paging: Pagination = Depends(page_params(PRODUCTS_DEFAULT_LIMIT)),
    sort: ProductSort = Query(ProductSort.CREATED_DESC),
    category: Optional[int] = Query(None, gt=0),
    search: Optional[str] = Query(None, max_length=200),
    brand: Optional[str] = Query(None, max_length=100),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    condition: Optional[ProductCondition] = Query(None),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    featured: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    products, total = await catalog_service.list_products(
        db,
        search=search,
        category_id=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        condition=condition.value if condition else None,
        in_stock=in_stock,
        featured=featured,
        sort=sort.value,
        limit=paging["limit"],
        offset=paging["offset"],
    )
    return paginated_response(
        [product_payload(p) for p in products],
        key="products",
        page=paging["page"],
        limit=paging["limit"],
        total=total,
        total_key="totalProducts",
    )


@router.get("/browse")
async def browse_products(
    sort_by: BrowseSort = Query(BrowseSort.NEWEST, alias="sortBy"),
    search: str = Query("", max_length=200),
    category: Optional[int] = Query(None, gt=0),
    min_price: float = Query(BROWSE_MIN_PRICE, alias="minPrice", ge=0),
    max_price: float = Query(BROWSE_MAX_PRICE, alias="maxPrice", ge=0),
    condition: List[ProductCondition] = Query([]),
    brand: List[str] = Query([]),
    in_stock: bool = Query(False, alias="inStock"),
    db: AsyncSession = Depends(get_db),
):
    """Storefront view: the whole active catalog filtered and sorted in memory."""
    candidates = await catalog_service.list_active_products(db)
    filters = BrowseFilters(
        category=category,
        price_range=(min_price, max_price),
        condition=[c.value for c in condition],
        brand=brand,
        in_stock=in_stock,
    )
    products = filter_products(candidates, filters, search_query=search, sort_by=sort_by)
    return success_response(
        data={
            "products": [product_payload(p) for p in products],
            "brands": distinct_brands(candidates),
        },
        meta={"total": len(products)},
    )


@router.get("/{id}")
async def get_product(product_id: int = Depends(validated_id), db: AsyncSession = Depends(get_db)):
    product = await catalog_service.get_product(db, product_id=product_id)
    return success_response(data={"product": product_payload(product)})


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_product(request: ProductCreateRequest, db: AsyncSession = Depends(get_db)):
    fields = request.model_dump(mode="json")
    category_id = fields.pop("category")
    product = await catalog_service.create_product(db, category_id=category_id, **fields)
    await db.commit()
    return success_response(data={"product": product_payload(product)}, message="Product created")


@router.put("/{id}", dependencies=[Depends(require_admin)])
async def update_product(
    request: ProductUpdateRequest,
    product_id: int = Depends(validated_id),
    db: AsyncSession = Depends(get_db),
):
    product = await catalog_service.update_product(
        db,
        product_id=product_id,
        changes=request.model_dump(exclude_unset=True, mode="json"),
    )
    await db.commit()
    return success_response(data={"product": product_payload(product)}, message="Product updated")


@router.delete("/{id}", dependencies=[Depends(require_admin)])
async def delete_product(product_id: int = Depends(validated_id), db: AsyncSession = Depends(get_db)):
    product = await catalog_service.soft_delete_product(db, product_id=product_id)
    await db.commit()
    logger.info(f"Deactivated product {product.sku}")
    return success_response(message="Product deleted")
