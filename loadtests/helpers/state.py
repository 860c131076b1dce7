"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; only the scarce product is
shared so that every user competes for the same stock.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    token: str | None = None
    placed_order_ids: list[str] = field(default_factory=list)
    sold_out_count: int = 0

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


@dataclass
class ContestedStock:
    """The product every shopper tries to buy, created once per test run."""

    product_id: str | None = None
    initial_stock: int = 0
