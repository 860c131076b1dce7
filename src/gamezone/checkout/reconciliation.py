"""Finish checkouts and cancellations that stopped halfway.

A PENDING order is driven forward: missing decrements are applied (holds
make the ones that already landed no-ops), the ordered lines leave the cart
and the order is placed. If stock has run out meanwhile, the order is
compensated and marked FAILED instead. A CANCELLING order gets its holds
back and is marked CANCELLED.

Each order is handled under its owner's guard, so a live checkout or cart
edit for that user never interleaves with reconciliation.
"""

from dataclasses import dataclass, field
from datetime import timedelta

from gamezone.cart.service import user_guard
from gamezone.checkout.saga import CheckoutService
from gamezone.errors import InsufficientStock, NotFound, TransientStoreError
from gamezone.order.order import Order, OrderStatus
from gamezone.utils.logging import get_logger
from gamezone.utils.time import as_utc, utcnow

logger = get_logger(__name__)


@dataclass
class ReconciliationReport:
    placed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)
    stalled: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "placed": self.placed,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "stalled": self.stalled,
        }


class CheckoutReconciler:
    def __init__(self, checkout: CheckoutService, older_than_seconds: int = 60) -> None:
        self.checkout = checkout
        self.storage = checkout.storage
        self.older_than = timedelta(seconds=older_than_seconds)

    def _candidates(self, older_than: timedelta) -> list[Order]:
        cutoff = utcnow() - older_than
        with self.storage.locked():
            in_flight = self.storage.repository_for(Order).in_flight()
        return [order for order in in_flight if (as_utc(order.updated_at) or cutoff) <= cutoff]

    def reconcile(self, older_than_seconds: int | None = None) -> ReconciliationReport:
        older_than = self.older_than if older_than_seconds is None else timedelta(seconds=older_than_seconds)
        report = ReconciliationReport()

        for candidate in self._candidates(older_than):
            with self.storage.guard(user_guard(candidate.user_id)):
                order = self.checkout.load_order(candidate.id)
                try:
                    self._repair(order, report)
                except TransientStoreError as exc:
                    logger.warning("reconcile_stalled", order_id=str(order.id), error=exc.message)
                    report.stalled.append(str(order.id))

        logger.info("reconcile_finished", **{key: len(value) for key, value in report.to_dict().items()})
        return report

    def _repair(self, order: Order, report: ReconciliationReport) -> None:
        status = order.current_status

        if status == OrderStatus.PENDING:
            try:
                self.checkout.take_stock(order)
            except (InsufficientStock, NotFound) as exc:
                self.checkout.compensate(order, exc.message)
                report.failed.append(str(order.id))
                return
            self.checkout.clear_ordered_lines(order)
            self.checkout.complete_placement(order)
            report.placed.append(str(order.id))

        elif status == OrderStatus.CANCELLING:
            self.checkout.finish_cancellation(order)
            report.cancelled.append(str(order.id))
