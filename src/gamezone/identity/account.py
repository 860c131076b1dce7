"""Account aggregate: credentials, contact details, role and wishlist."""

import json

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text, ValueObject

from gamezone.domain import gamezone
from gamezone.identity.access import Role
from gamezone.identity.events import AccountRegistered, ProfileUpdated
from gamezone.utils.time import utcnow

MIN_PASSWORD_LENGTH = 6


@gamezone.value_object(part_of="Account")
class PostalAddress:
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    pincode = String(max_length=20)


@gamezone.aggregate
class Account:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=20)
    password_hash = String(required=True, max_length=255)
    address = ValueObject(PostalAddress)
    role = String(choices=Role, default=Role.USER.value)
    wishlist = Text()  # JSON array of product ids
    is_verified = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, email, phone, password_hash, role=Role.USER.value):
        now = utcnow()
        account = cls(
            name=(name or "").strip(),
            email=(email or "").strip().lower(),
            phone=(phone or "").strip(),
            password_hash=password_hash,
            role=role,
            wishlist=json.dumps([]),
            created_at=now,
            updated_at=now,
        )
        account.raise_(
            AccountRegistered(
                account_id=str(account.id),
                email=account.email,
                role=account.role,
                registered_at=now,
            )
        )
        return account

    @property
    def wishlist_ids(self) -> list[str]:
        return json.loads(self.wishlist) if self.wishlist else []

    def toggle_wishlist(self, product_id) -> bool:
        """Add ``product_id`` to the wishlist or take it out; True when added."""
        ids = self.wishlist_ids
        product_id = str(product_id)
        added = product_id not in ids
        if added:
            ids.append(product_id)
        else:
            ids.remove(product_id)
        self.wishlist = json.dumps(ids)
        self.updated_at = utcnow()
        return added

    def update_profile(self, name=None, phone=None, address=None):
        if name is not None:
            if not name.strip():
                raise ValidationError({"name": ["Name is required"]})
            self.name = name.strip()
        if phone is not None:
            if not phone.strip():
                raise ValidationError({"phone": ["Phone is required"]})
            self.phone = phone.strip()
        if address is not None:
            self.address = PostalAddress(**address) if isinstance(address, dict) else address

        now = utcnow()
        self.updated_at = now
        self.raise_(ProfileUpdated(account_id=str(self.id), updated_at=now))
