"""
Pydantic models for request/response validation.

JSON uses camelCase aliases (the storefront client's convention); Python code
uses snake_case names. Response models are built straight from ORM rows.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Any, List, Optional
from datetime import datetime

from domain.constants import MIN_PAYMENT_AMOUNT
from domain.enums import Currency, OrderStatus, PaymentMethod, ProductCondition


class StoreBase(BaseModel):
    """Shared base — allows construction by Python name or alias, and from ORM rows."""
    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def to_payload(model: BaseModel) -> dict[str, Any]:
    """Serialize a response model to camelCase JSON-ready dict."""
    return model.model_dump(by_alias=True, mode="json")


# ── Auth Models ─────────────────────────────────────────────────────

class RegisterRequest(StoreBase):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(StoreBase):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(StoreBase):
    id: int
    name: str
    email: str
    role: str
    is_active: bool = Field(True, alias="isActive")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class UserSummary(StoreBase):
    id: int
    name: str
    email: str


# ── Category Models ─────────────────────────────────────────────────

class CategoryCreateRequest(StoreBase):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: str = Field(default="", max_length=2000)
    image: Optional[str] = Field(default=None, max_length=500)


class CategoryUpdateRequest(StoreBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    image: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class CategorySummary(StoreBase):
    id: int
    name: str
    slug: str


class CategoryResponse(StoreBase):
    id: int
    name: str
    slug: str
    description: str = ""
    image: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")
    product_count: int = Field(0, alias="productCount")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


# ── Product Models ──────────────────────────────────────────────────

class ProductCreateRequest(StoreBase):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(default=None, alias="originalPrice", ge=0)
    category: int = Field(..., gt=0, description="Category ID")
    brand: str = Field(..., min_length=1, max_length=100)
    condition: ProductCondition
    stock_count: int = Field(..., alias="stockCount", ge=0)
    sku: str = Field(..., min_length=1, max_length=64)
    images: List[str] = Field(..., min_length=1)
    specifications: dict[str, str] = Field(default_factory=dict)
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, alias="reviewCount", ge=0)
    featured: bool = False


class ProductUpdateRequest(StoreBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    price: Optional[float] = Field(default=None, ge=0)
    original_price: Optional[float] = Field(default=None, alias="originalPrice", ge=0)
    category: Optional[int] = Field(default=None, gt=0)
    brand: Optional[str] = Field(default=None, min_length=1, max_length=100)
    condition: Optional[ProductCondition] = None
    stock_count: Optional[int] = Field(default=None, alias="stockCount", ge=0)
    sku: Optional[str] = Field(default=None, min_length=1, max_length=64)
    images: Optional[List[str]] = Field(default=None, min_length=1)
    specifications: Optional[dict[str, str]] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    review_count: Optional[int] = Field(default=None, alias="reviewCount", ge=0)
    featured: Optional[bool] = None


class ProductResponse(StoreBase):
    id: int
    name: str
    description: str
    price: float
    original_price: Optional[float] = Field(None, alias="originalPrice")
    condition: str
    category: Optional[CategorySummary] = None
    brand: str
    images: List[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)
    in_stock: bool = Field(..., alias="inStock")
    stock_count: int = Field(..., alias="stockCount")
    rating: float = 0.0
    review_count: int = Field(0, alias="reviewCount")
    featured: bool = False
    sku: str
    is_active: bool = Field(True, alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


# ── Cart Models ─────────────────────────────────────────────────────

class CartAddRequest(StoreBase):
    product_id: int = Field(..., alias="productId", gt=0)
    quantity: int = Field(1, ge=1, le=100)


class CartQuantityRequest(StoreBase):
    quantity: int = Field(..., le=100, description="0 or less removes the line")


class CartLineResponse(StoreBase):
    product: ProductResponse
    quantity: int
    line_total: float = Field(..., alias="lineTotal")


# ── Order Models ────────────────────────────────────────────────────

class OrderItemRequest(StoreBase):
    product: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., ge=1, le=100)


class ShippingAddress(StoreBase):
    first_name: str = Field(..., alias="firstName", min_length=1, max_length=100)
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=100)
    email: EmailStr
    address: str = Field(..., min_length=1, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., alias="zipCode", min_length=1, max_length=20)
    country: Optional[str] = Field(default=None, max_length=100)


class OrderCreateRequest(StoreBase):
    items: List[OrderItemRequest] = Field(..., min_length=1)
    shipping_address: ShippingAddress = Field(..., alias="shippingAddress")
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")


class OrderStatusUpdateRequest(StoreBase):
    status: OrderStatus
    tracking_number: Optional[str] = Field(default=None, alias="trackingNumber", max_length=100)


class OrderItemResponse(StoreBase):
    product: int = Field(..., validation_alias="product_id", serialization_alias="product")
    name: str
    price: float
    quantity: int
    image: Optional[str] = None


class OrderResponse(StoreBase):
    id: int
    user: Optional[UserSummary] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
    shipping_address: dict[str, Any] = Field(..., alias="shippingAddress")
    payment_method: str = Field(..., alias="paymentMethod")
    payment_result: Optional[dict[str, Any]] = Field(None, alias="paymentResult")
    items_price: float = Field(..., alias="itemsPrice")
    tax_price: float = Field(..., alias="taxPrice")
    shipping_price: float = Field(..., alias="shippingPrice")
    total_price: float = Field(..., alias="totalPrice")
    is_paid: bool = Field(False, alias="isPaid")
    paid_at: Optional[datetime] = Field(None, alias="paidAt")
    is_delivered: bool = Field(False, alias="isDelivered")
    delivered_at: Optional[datetime] = Field(None, alias="deliveredAt")
    status: str
    tracking_number: Optional[str] = Field(None, alias="trackingNumber")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


# ── Payment Models ──────────────────────────────────────────────────

class PaymentIntentRequest(StoreBase):
    amount: float = Field(..., ge=MIN_PAYMENT_AMOUNT, description="Amount in major units (e.g. dollars)")
    currency: Currency = Currency.USD
    order_id: Optional[int] = Field(default=None, alias="orderId", gt=0)


class PaymentIntentResponse(StoreBase):
    client_secret: Optional[str] = Field(None, alias="clientSecret")
    payment_intent_id: str = Field(..., alias="paymentIntentId")


class ConfirmPaymentRequest(StoreBase):
    payment_intent_id: str = Field(..., alias="paymentIntentId", min_length=1)
    order_id: int = Field(..., alias="orderId", gt=0)


# ── Serialization helpers ───────────────────────────────────────────

def user_payload(user) -> dict[str, Any]:
    return to_payload(UserResponse.model_validate(user))


def category_payload(category, product_count: int = 0) -> dict[str, Any]:
    model = CategoryResponse.model_validate(category).model_copy(update={"product_count": product_count})
    return to_payload(model)


def product_payload(product) -> dict[str, Any]:
    return to_payload(ProductResponse.model_validate(product))


def order_payload(order) -> dict[str, Any]:
    return to_payload(OrderResponse.model_validate(order))


def cart_line_payload(item, line_total: float) -> dict[str, Any]:
    return to_payload(
        CartLineResponse(
            product=ProductResponse.model_validate(item.product),
            quantity=item.quantity,
            line_total=line_total,
        )
    )
