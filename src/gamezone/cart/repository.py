"""Repository for the Cart aggregate."""

from gamezone.cart.cart import Cart
from gamezone.domain import gamezone


@gamezone.repository(part_of=Cart)
class CartRepository:
    def find(self, user_id) -> Cart | None:
        """The user's live cart, or None if they have nothing in it."""
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def remove(self, cart: Cart) -> None:
        self._dao.delete(cart)
