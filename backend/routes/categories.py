"""
Category endpoints — public listing/lookup plus admin management.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import require_admin
from domain.responses import success_response
from models import CategoryCreateRequest, CategoryUpdateRequest, category_payload
from services import catalog_service
from utils.validators import validated_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(
    search: str | None = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    rows = await catalog_service.list_categories(db, search=search)
    categories = [category_payload(c, n) for c, n in rows]
    return success_response(data={"categories": categories}, meta={"total": len(categories)})


@router.get("/slug/{slug}")
async def get_category_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    category = await catalog_service.get_category_by_slug(db, slug=slug)
    count = await catalog_service.count_category_products(db, category_id=category.id)
    return success_response(data={"category": category_payload(category, count)})


@router.get("/{id}")
async def get_category(category_id: int = Depends(validated_id), db: AsyncSession = Depends(get_db)):
    category = await catalog_service.get_category(db, category_id=category_id)
    count = await catalog_service.count_category_products(db, category_id=category.id)
    return success_response(data={"category": category_payload(category, count)})


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(request: CategoryCreateRequest, db: AsyncSession = Depends(get_db)):
    category = await catalog_service.create_category(
        db,
        name=request.name,
        slug=request.slug,
        description=request.description,
        image=request.image,
    )
    await db.commit()
    return success_response(data={"category": category_payload(category)}, message="Category created")


@router.put("/{id}", dependencies=[Depends(require_admin)])
async def update_category(
    request: CategoryUpdateRequest,
    category_id: int = Depends(validated_id),
    db: AsyncSession = Depends(get_db),
):
    category = await catalog_service.update_category(
        db,
        category_id=category_id,
        changes=request.model_dump(exclude_unset=True),
    )
    await db.commit()
    count = await catalog_service.count_category_products(db, category_id=category.id)
    return success_response(data={"category": category_payload(category, count)}, message="Category updated")


@router.delete("/{id}", dependencies=[Depends(require_admin)])
async def delete_category(category_id: int = Depends(validated_id), db: AsyncSession = Depends(get_db)):
    category = await catalog_service.delete_category(db, category_id=category_id)
    await db.commit()
    logger.info(f"Deleted category '{category.slug}'")
    return success_response(message="Category deleted")
