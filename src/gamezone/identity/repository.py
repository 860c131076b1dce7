"""Repository for the Account aggregate."""

from gamezone.domain import gamezone
from gamezone.identity.account import Account


@gamezone.repository(part_of=Account)
class AccountRepository:
    def find_by_email(self, email: str) -> Account | None:
        return self._dao.query.filter(email=email.strip().lower()).all().first

    def find_by_phone(self, phone: str) -> Account | None:
        return self._dao.query.filter(phone=phone.strip()).all().first
