"""Cart aggregate: at most one live cart per user.

The cart carries its own generated identity and records its owner in
``user_id``. A cart emptied by checkout or cleared by its owner is deleted;
the next add starts a fresh one.

``total_price`` is a cache of live catalogue prices times quantities. It is
recomputed by ``reprice`` before every save and every read, and nothing
downstream trusts the stored value.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from gamezone.cart.events import CartItemAdded, CartItemRemoved, CartQuantityUpdated
from gamezone.domain import gamezone
from gamezone.utils.time import utcnow


@gamezone.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@gamezone.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def product_appears_once(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    @classmethod
    def create(cls, user_id):
        now = utcnow()
        return cls(user_id=str(user_id), total_price=0.0, created_at=now, updated_at=now)

    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def add_item(self, product_id, quantity=1):
        """Add ``quantity`` of a product, merging with an existing line."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = utcnow()
        existing = self.item_for(product_id)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=str(product_id), quantity=quantity, added_at=now))
        self.updated_at = now

        self.raise_(CartItemAdded(user_id=str(self.user_id), product_id=str(product_id), quantity=quantity))

    def set_quantity(self, product_id, quantity):
        """Set a line's quantity; zero or less removes the line.

        Returns False when the product is not in the cart.
        """
        item = self.item_for(product_id)
        if item is None:
            return False
        if quantity <= 0:
            return self.remove_item(product_id)

        previous = item.quantity
        item.quantity = quantity
        self.updated_at = utcnow()

        self.raise_(
            CartQuantityUpdated(
                user_id=str(self.user_id),
                product_id=str(product_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )
        return True

    def remove_item(self, product_id):
        item = self.item_for(product_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = utcnow()
        self.raise_(CartItemRemoved(user_id=str(self.user_id), product_id=str(product_id)))
        return True

    def reprice(self, prices):
        """Recompute ``total_price`` from ``prices`` (product id -> unit price).

        Lines whose product has no price (it was deleted) are dropped.
        """
        for item in list(self.items):
            if prices.get(str(item.product_id)) is None:
                self.remove_items(item)

        total = sum(prices[str(item.product_id)] * item.quantity for item in self.items)
        self.total_price = round(total, 2)
        return self.total_price
