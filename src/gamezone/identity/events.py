"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Identifier, String

from gamezone.domain import gamezone


@gamezone.event(part_of="Account")
class AccountRegistered:
    __version__ = 1

    account_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@gamezone.event(part_of="Account")
class ProfileUpdated:
    __version__ = 1

    account_id = Identifier(required=True)
    updated_at = DateTime(required=True)
