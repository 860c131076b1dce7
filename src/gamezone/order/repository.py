"""Repository for the Order aggregate."""

from gamezone.domain import gamezone
from gamezone.order.order import Order, OrderStatus
from gamezone.storage import iter_all
from gamezone.utils.time import sort_key


def newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: sort_key(order.created_at), reverse=True)


@gamezone.repository(part_of=Order)
class OrderRepository:
    def for_user(self, user_id) -> list[Order]:
        return newest_first(list(iter_all(self._dao.query.filter(user_id=str(user_id)))))

    def all_orders(self, status: str | None = None) -> list[Order]:
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return newest_first(list(iter_all(query)))

    def in_flight(self) -> list[Order]:
        """Orders a saga left halfway: pending placement or cancellation."""
        orders = []
        for status in (OrderStatus.PENDING, OrderStatus.CANCELLING):
            orders.extend(iter_all(self._dao.query.filter(status=status.value)))
        return orders

    def by_tracking_id(self, tracking_id: str) -> Order | None:
        return self._dao.query.filter(tracking_id=tracking_id).all().first

    def by_idempotency_key(self, user_id, key: str) -> Order | None:
        """The user's order for ``key``, skipping attempts that failed."""
        query = self._dao.query.filter(user_id=str(user_id), idempotency_key=key)
        return query.exclude(status=OrderStatus.FAILED.value).all().first
