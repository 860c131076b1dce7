"""Cart use cases.

Every mutation for a user runs under the same ``user:<id>`` guard as that
user's checkout, so a checkout never deletes a line added while it ran.
"""

from dataclasses import dataclass, field

from gamezone.cart.cart import Cart
from gamezone.catalogue.store import CatalogStore
from gamezone.errors import NotFound, ValidationError
from gamezone.storage import Storage


def user_guard(user_id) -> str:
    return f"user:{user_id}"


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    price: float
    quantity: int
    emoji: str | None = None

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass(frozen=True)
class CartView:
    user_id: str
    items: list[CartLine] = field(default_factory=list)
    total_price: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.items


class CartService:
    def __init__(self, storage: Storage, catalog: CatalogStore) -> None:
        self.storage = storage
        self.catalog = catalog

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _live_products(self, cart: Cart) -> dict:
        products = {}
        for item in cart.items:
            try:
                products[str(item.product_id)] = self.catalog.get_product(item.product_id)
            except NotFound:
                products[str(item.product_id)] = None
        return products

    def _reprice(self, cart: Cart):
        products = self._live_products(cart)
        cart.reprice({pid: (p.price if p else None) for pid, p in products.items()})
        return products

    def _view(self, cart: Cart, products: dict) -> CartView:
        lines = []
        for item in cart.items:
            product = products[str(item.product_id)]
            lines.append(
                CartLine(
                    product_id=str(item.product_id),
                    name=product.name,
                    price=product.price,
                    quantity=item.quantity,
                    emoji=product.emoji,
                )
            )
        return CartView(user_id=str(cart.user_id), items=lines, total_price=cart.total_price)

    def _save(self, cart: Cart) -> None:
        with self.storage.locked():
            self.storage.repository_for(Cart).add(cart)

    def _find(self, user_id) -> Cart | None:
        with self.storage.locked():
            return self.storage.repository_for(Cart).find(user_id)

    # -------------------------------------------------------------------
    # Use cases
    # -------------------------------------------------------------------
    def get(self, user_id) -> CartView:
        with self.storage.guard(user_guard(user_id)):
            cart = self._find(user_id)
            if cart is None:
                return CartView(user_id=str(user_id))

            count = len(cart.items)
            products = self._reprice(cart)
            if len(cart.items) != count:
                self._save(cart)
            return self._view(cart, products)

    def add_item(self, user_id, product_id, quantity=1) -> CartView:
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product = self.catalog.get_product(product_id)
        if not product.is_active:
            raise NotFound("Product not found", product_id=str(product_id))

        with self.storage.guard(user_guard(user_id)):
            cart = self._find(user_id) or Cart.create(user_id)
            cart.add_item(product_id, quantity)
            products = self._reprice(cart)
            self._save(cart)
            return self._view(cart, products)

    def update_quantity(self, user_id, product_id, quantity) -> CartView:
        with self.storage.guard(user_guard(user_id)):
            cart = self._find(user_id)
            if cart is None:
                raise NotFound("Cart not found")
            if not cart.set_quantity(product_id, quantity):
                raise NotFound("Item not in cart", product_id=str(product_id))

            products = self._reprice(cart)
            self._save(cart)
            return self._view(cart, products)

    def remove_item(self, user_id, product_id) -> CartView:
        with self.storage.guard(user_guard(user_id)):
            cart = self._find(user_id)
            if cart is None:
                return CartView(user_id=str(user_id))

            cart.remove_item(product_id)
            products = self._reprice(cart)
            self._save(cart)
            return self._view(cart, products)

    def clear(self, user_id) -> None:
        with self.storage.guard(user_guard(user_id)):
            with self.storage.locked():
                repo = self.storage.repository_for(Cart)
                cart = repo.find(user_id)
                if cart is not None:
                    repo.remove(cart)
