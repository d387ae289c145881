"""
Admin dashboard endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import require_admin
from domain.responses import success_response
from services import auth_service, catalog_service, order_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats")
async def dashboard_stats(db: AsyncSession = Depends(get_db)):
    """Headline numbers for the admin dashboard."""
    stats = await order_service.order_stats(db)
    return success_response(
        data={
            "totalOrders": stats["totalOrders"],
            "totalRevenue": stats["totalRevenue"],
            "totalProducts": await catalog_service.count_active_products(db),
            "totalUsers": await auth_service.count_users(db),
            "ordersByStatus": stats["ordersByStatus"],
        }
    )
