"""Pydantic request/response schemas for the GameZone API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from gamezone.utils.time import as_utc


class Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(Schema):
    message: str


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
class AddressSchema(Schema):
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    pincode: str | None = Field(None, max_length=20)


class RegisterRequest(Schema):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Arjun Mehta",
                    "email": "arjun@example.com",
                    "phone": "9876543210",
                    "password": "secret123",
                }
            ]
        },
    )

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    password: str


class LoginRequest(Schema):
    email: str
    password: str


class UpdateProfileRequest(Schema):
    name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)
    address: AddressSchema | None = None


class UserResponse(Schema):
    id: str
    name: str
    email: str
    phone: str
    role: str
    address: AddressSchema | None = None
    wishlist: list[str] = []
    is_verified: bool = False

    @classmethod
    def from_account(cls, account) -> UserResponse:
        address = None
        if account.address is not None:
            address = AddressSchema(
                street=account.address.street,
                city=account.address.city,
                state=account.address.state,
                pincode=account.address.pincode,
            )
        return cls(
            id=str(account.id),
            name=account.name,
            email=account.email,
            phone=account.phone,
            role=account.role,
            address=address,
            wishlist=account.wishlist_ids,
            is_verified=bool(account.is_verified),
        )


class AuthResponse(Schema):
    message: str
    token: str
    user: UserResponse


class ProfileUpdateResponse(Schema):
    message: str
    user: UserResponse


class WishlistResponse(Schema):
    message: str
    wishlist: list[str]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class RatingSchema(Schema):
    average: float = 0.0
    count: int = 0


class CreateProductRequest(Schema):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "God of War Ragnarok",
                    "description": "Epic Norse mythology adventure",
                    "price": 2999,
                    "originalPrice": 4999,
                    "platform": "ps5",
                    "condition": "like-new",
                    "category": "game",
                    "stock": 5,
                    "tags": ["action", "adventure"],
                }
            ]
        },
    )

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    original_price: float = Field(..., ge=0)
    platform: str
    condition: str
    category: str | None = None
    emoji: str | None = Field(None, max_length=16)
    stock: int = Field(1, ge=0)
    tags: list[str] = []
    is_featured: bool = False
    is_deal: bool = False


class UpdateProductRequest(Schema):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    original_price: float | None = Field(None, ge=0)
    platform: str | None = None
    condition: str | None = None
    category: str | None = None
    emoji: str | None = Field(None, max_length=16)
    stock: int | None = Field(None, ge=0)
    tags: list[str] | None = None
    is_featured: bool | None = None
    is_deal: bool | None = None
    is_active: bool | None = None


class ProductResponse(Schema):
    id: str
    name: str
    description: str
    price: float
    original_price: float
    discount: int
    platform: str
    condition: str
    category: str
    emoji: str | None = None
    stock: int
    seller_id: str | None = None
    rating: RatingSchema
    tags: list[str] = []
    is_featured: bool = False
    is_deal: bool = False
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product) -> ProductResponse:
        rating = product.rating
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            original_price=product.original_price,
            discount=product.discount,
            platform=product.platform,
            condition=product.condition,
            category=product.category,
            emoji=product.emoji,
            stock=product.stock,
            seller_id=str(product.seller_id) if product.seller_id else None,
            rating=RatingSchema(
                average=rating.average if rating else 0.0,
                count=rating.count if rating else 0,
            ),
            tags=product.tag_list,
            is_featured=bool(product.is_featured),
            is_deal=bool(product.is_deal),
            is_active=bool(product.is_active),
            created_at=as_utc(product.created_at),
            updated_at=as_utc(product.updated_at),
        )


class ProductPageResponse(Schema):
    products: list[ProductResponse]
    current_page: int
    total_pages: int
    total_products: int


class ProductMutationResponse(Schema):
    message: str
    product: ProductResponse


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(Schema):
    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartRequest(Schema):
    product_id: str
    quantity: int


class CartLineResponse(Schema):
    product_id: str
    name: str
    price: float
    quantity: int
    line_total: float
    emoji: str | None = None


class CartResponse(Schema):
    message: str | None = None
    items: list[CartLineResponse] = []
    total_price: float = 0.0

    @classmethod
    def from_view(cls, view, message=None) -> CartResponse:
        return cls(
            message=message,
            items=[
                CartLineResponse(
                    product_id=line.product_id,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    line_total=line.line_total,
                    emoji=line.emoji,
                )
                for line in view.items
            ],
            total_price=view.total_price,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ShippingAddressSchema(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=20)


class PlaceOrderRequest(Schema):
    shipping_address: ShippingAddressSchema
    payment_method: str = "cod"


class UpdateOrderStatusRequest(Schema):
    order_status: str


class OrderItemResponse(Schema):
    product_id: str
    name: str
    price: float
    quantity: int


class OrderResponse(Schema):
    id: str
    user_id: str
    items: list[OrderItemResponse]
    shipping_address: ShippingAddressSchema | None = None
    payment_method: str
    payment_status: str
    order_status: str
    subtotal: float
    delivery_charge: float
    total_amount: float
    tracking_id: str
    checkout_step: str | None = None
    failure_reason: str | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        address = order.shipping_address
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                )
                for item in order.items
            ],
            shipping_address=(
                ShippingAddressSchema(
                    name=address.name,
                    phone=address.phone,
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    pincode=address.pincode,
                )
                if address
                else None
            ),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            order_status=order.status,
            subtotal=order.subtotal,
            delivery_charge=order.delivery_charge,
            total_amount=order.total_amount,
            tracking_id=order.tracking_id,
            checkout_step=order.checkout_step,
            failure_reason=order.failure_reason,
            delivered_at=as_utc(order.delivered_at),
            cancelled_at=as_utc(order.cancelled_at),
            created_at=as_utc(order.created_at),
            updated_at=as_utc(order.updated_at),
        )


class OrderMutationResponse(Schema):
    message: str
    order: OrderResponse


class OrderStatsResponse(Schema):
    total_orders: int
    total_revenue: float
    pending_orders: int
    delivered_orders: int


class AdminOrdersResponse(Schema):
    orders: list[OrderResponse]
    stats: OrderStatsResponse


class ReconcileResponse(Schema):
    placed: list[str]
    failed: list[str]
    cancelled: list[str]
    stalled: list[str]
