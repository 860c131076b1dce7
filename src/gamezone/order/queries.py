"""Read side for orders: a user's history, single lookups and the admin list."""

from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError

from gamezone.errors import NotFound
from gamezone.identity.access import Principal, require
from gamezone.order.order import Order, OrderStatus
from gamezone.storage import Storage


@dataclass(frozen=True)
class OrderStats:
    total_orders: int = 0
    total_revenue: float = 0.0
    pending_orders: int = 0
    delivered_orders: int = 0

    @classmethod
    def of(cls, orders: list[Order]) -> "OrderStats":
        return cls(
            total_orders=len(orders),
            total_revenue=round(sum(order.total_amount for order in orders), 2),
            pending_orders=sum(1 for order in orders if order.status == OrderStatus.PLACED.value),
            delivered_orders=sum(1 for order in orders if order.status == OrderStatus.DELIVERED.value),
        )


@dataclass(frozen=True)
class OrderListing:
    orders: list[Order] = field(default_factory=list)
    stats: OrderStats = field(default_factory=OrderStats)


class OrderQueries:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def my_orders(self, user_id) -> list[Order]:
        with self.storage.locked():
            return self.storage.repository_for(Order).for_user(user_id)

    def get_order(self, principal: Principal, order_id) -> Order:
        with self.storage.locked():
            try:
                order = self.storage.repository_for(Order).get(str(order_id))
            except ObjectNotFoundError:
                raise NotFound("Order not found", order_id=str(order_id)) from None
        require(principal.can_view_order(order))
        return order

    def all_orders(self, principal: Principal, status: str | None = None) -> OrderListing:
        """Every order, newest first, with stats over the returned set.

        FAILED orders never happened from the customer's point of view and
        are only listed when asked for by status.
        """
        require(principal.is_admin, "Admin access required")

        with self.storage.locked():
            orders = self.storage.repository_for(Order).all_orders(status)
        if not status:
            orders = [order for order in orders if order.status != OrderStatus.FAILED.value]
        return OrderListing(orders=orders, stats=OrderStats.of(orders))
