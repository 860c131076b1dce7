"""Product aggregate: a listing in the marketplace catalogue.

Stock is the only field mutated concurrently. Orders take stock through
``adjust_stock`` with their order id as ``reference``: the product keeps a
``StockHold`` per reference, so taking stock twice for the same order is a
no-op, restoring it only gives back what that order actually took, and the
checkout reconciler can ask the product whether an order's decrement landed.
"""

import json
import math
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from gamezone.catalogue.events import ProductListed, ProductUpdated, StockAdjusted
from gamezone.domain import gamezone
from gamezone.errors import InsufficientStock
from gamezone.utils.time import utcnow


class Platform(Enum):
    PS5 = "ps5"
    PS4 = "ps4"
    XBOX = "xbox"
    NINTENDO = "nintendo"
    PC = "pc"
    CONSOLE = "console"
    ACCESSORIES = "accessories"


class Condition(Enum):
    NEW = "new"
    LIKE_NEW = "like-new"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"


class Category(Enum):
    GAME = "game"
    CONSOLE = "console"
    ACCESSORY = "accessory"
    MERCHANDISE = "merchandise"


# Fields a seller or admin may edit after listing
EDITABLE_FIELDS = (
    "name",
    "description",
    "price",
    "original_price",
    "platform",
    "condition",
    "category",
    "emoji",
    "stock",
    "tags",
    "is_featured",
    "is_deal",
    "is_active",
)


@gamezone.value_object(part_of="Product")
class Rating:
    average = Float(default=0.0, min_value=0.0, max_value=5.0)
    count = Integer(default=0, min_value=0)


@gamezone.entity(part_of="Product")
class StockHold:
    """Stock taken from the product on behalf of one order."""

    reference = String(required=True, max_length=100)
    quantity = Integer(required=True, min_value=1)
    held_at = DateTime()


@gamezone.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    original_price = Float(required=True, min_value=0.0)
    platform = String(required=True, choices=Platform)
    condition = String(required=True, choices=Condition)
    category = String(choices=Category, default=Category.GAME.value)
    emoji = String(max_length=16, default="🎮")
    stock = Integer(default=1)
    seller_id = Identifier()
    rating = ValueObject(Rating)
    tags = Text()  # JSON array of strings
    holds = HasMany(StockHold)
    is_featured = Boolean(default=False)
    is_deal = Boolean(default=False)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        description,
        price,
        original_price,
        platform,
        condition,
        category=None,
        stock=1,
        seller_id=None,
        emoji=None,
        tags=None,
        is_featured=False,
        is_deal=False,
        rating=None,
    ):
        now = utcnow()
        product = cls(
            name=name,
            description=description,
            price=price,
            original_price=original_price,
            platform=platform,
            condition=condition,
            category=category or Category.GAME.value,
            emoji=emoji or "🎮",
            stock=stock,
            seller_id=seller_id,
            rating=Rating(**rating) if isinstance(rating, dict) else (rating or Rating()),
            tags=json.dumps(list(tags or [])),
            is_featured=is_featured,
            is_deal=is_deal,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                seller_id=str(seller_id) if seller_id else None,
                name=name,
                price=price,
                stock=stock,
                listed_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def discount(self):
        """Percentage off the original price, rounded half up."""
        if not self.original_price:
            return 0
        return math.floor((1 - self.price / self.original_price) * 100 + 0.5)

    @property
    def tag_list(self):
        return json.loads(self.tags) if self.tags else []

    def hold_for(self, reference):
        return next((h for h in self.holds if h.reference == str(reference)), None)

    # -------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({field: ["Field cannot be edited"] for field in sorted(unknown)})

        for field, value in changes.items():
            if field == "tags":
                value = json.dumps(list(value or []))
            setattr(self, field, value)

        now = utcnow()
        self.updated_at = now
        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                changed_fields=",".join(sorted(changes)),
                price=self.price,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def adjust_stock(self, delta, conditional=True, reference=None):
        """Move stock by ``delta`` and return the new level.

        A conditional decrement that would go below zero raises
        ``InsufficientStock`` and changes nothing. An unconditional one
        removes whatever is left. With a ``reference``, a decrement is
        recorded as a hold and applied at most once, and an increment gives
        back exactly the held quantity (or nothing if no hold exists).
        """
        hold = self.hold_for(reference) if reference is not None else None

        if reference is not None:
            if delta < 0 and hold is not None:
                return self.stock
            if delta > 0:
                if hold is None:
                    return self.stock
                delta = hold.quantity

        if delta == 0:
            return self.stock

        previous = self.stock
        new_stock = previous + delta
        if new_stock < 0:
            if conditional:
                raise InsufficientStock(self.id, -delta, previous, name=self.name)
            new_stock = 0

        now = utcnow()
        self.stock = new_stock
        if reference is not None:
            if delta < 0:
                self.add_holds(StockHold(reference=str(reference), quantity=previous - new_stock, held_at=now))
            else:
                self.remove_holds(hold)
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                delta=new_stock - previous,
                previous_stock=previous,
                new_stock=new_stock,
                reference=str(reference) if reference is not None else None,
                adjusted_at=now,
            )
        )
        return self.stock
