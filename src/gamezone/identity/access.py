"""Roles, the authenticated principal and the authorization predicates.

Every permission decision in the services goes through the predicates on
``Principal``; the HTTP layer only resolves who the caller is.
"""

from dataclasses import dataclass
from enum import Enum

from gamezone.errors import Forbidden


class Role(Enum):
    USER = "user"
    SELLER = "seller"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = Role.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def owns(self, owner_id) -> bool:
        return owner_id is not None and str(owner_id) == str(self.user_id)

    def can_view_order(self, order) -> bool:
        return self.is_admin or self.owns(order.user_id)

    def can_cancel_order(self, order) -> bool:
        return self.is_admin or self.owns(order.user_id)

    def can_list_products(self) -> bool:
        return self.role in (Role.SELLER.value, Role.ADMIN.value)

    def can_manage_product(self, product) -> bool:
        return self.is_admin or self.owns(product.seller_id)


def require(allowed: bool, message: str = "Not authorized") -> None:
    if not allowed:
        raise Forbidden(message)
