"""
Domain enums shared by models, services and routers.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash_on_delivery"


class ProductCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    REFURBISHED = "refurbished"


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Currency(str, Enum):
    USD = "usd"
    EUR = "eur"
    GBP = "gbp"


class ProductSort(str, Enum):
    """Server-side catalog sort keys; a leading '-' means descending."""
    NAME = "name"
    PRICE = "price"
    PRICE_DESC = "-price"
    RATING = "rating"
    RATING_DESC = "-rating"
    CREATED = "createdAt"
    CREATED_DESC = "-createdAt"


class BrowseSort(str, Enum):
    """Storefront browse sort options."""
    NAME = "name"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"
    NEWEST = "newest"
