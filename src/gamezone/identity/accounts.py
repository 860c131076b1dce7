"""Account use cases: registration, login, profile and wishlist."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError

from gamezone.catalogue.store import CatalogStore
from gamezone.errors import AuthenticationFailed, NotFound, Unauthorized, ValidationError
from gamezone.identity.access import Principal, Role
from gamezone.identity.account import MIN_PASSWORD_LENGTH, Account
from gamezone.identity.passwords import hash_password, verify_password
from gamezone.identity.tokens import TokenIssuer
from gamezone.storage import Storage
from gamezone.utils.logging import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class AuthResult:
    token: str
    account: Account


@dataclass(frozen=True)
class WishlistChange:
    added: bool
    wishlist: list[str]


class AccountService:
    def __init__(self, storage: Storage, tokens: TokenIssuer, catalog: CatalogStore) -> None:
        self.storage = storage
        self.tokens = tokens
        self.catalog = catalog

    def _load(self, user_id) -> Account:
        try:
            return self.storage.repository_for(Account).get(str(user_id))
        except ObjectNotFoundError:
            raise NotFound("User not found", user_id=str(user_id)) from None

    def register(self, name, email, phone, password, role=Role.USER.value) -> AuthResult:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                {"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]}
            )
        if not email or not phone or not name:
            raise ValidationError("Name, email, phone and password are required")

        with self.storage.locked():
            repo = self.storage.repository_for(Account)
            if repo.find_by_email(email) or repo.find_by_phone(phone):
                raise ValidationError("User already exists with this email or phone")

            account = Account.register(
                name=name,
                email=email,
                phone=phone,
                password_hash=hash_password(password),
                role=role,
            )
            repo.add(account)

        logger.info("account_registered", account_id=str(account.id), role=account.role)
        return AuthResult(token=self.tokens.issue(account.id), account=account)

    def login(self, email, password) -> AuthResult:
        with self.storage.locked():
            account = self.storage.repository_for(Account).find_by_email(email or "")

        if account is None or not verify_password(password or "", account.password_hash):
            logger.info("login_failed")
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        return AuthResult(token=self.tokens.issue(account.id), account=account)

    def profile(self, user_id) -> Account:
        with self.storage.locked():
            return self._load(user_id)

    def update_profile(self, user_id, name=None, phone=None, address=None) -> Account:
        with self.storage.locked():
            repo = self.storage.repository_for(Account)
            account = self._load(user_id)
            if phone is not None and phone.strip() != account.phone:
                other = repo.find_by_phone(phone)
                if other is not None and str(other.id) != str(account.id):
                    raise ValidationError("User already exists with this email or phone")
            account.update_profile(name=name, phone=phone, address=address)
            repo.add(account)
            return account

    def toggle_wishlist(self, user_id, product_id) -> WishlistChange:
        self.catalog.get_product(product_id)

        with self.storage.locked():
            account = self._load(user_id)
            added = account.toggle_wishlist(product_id)
            self.storage.repository_for(Account).add(account)
            return WishlistChange(added=added, wishlist=account.wishlist_ids)

    def principal_for(self, token: str) -> Principal:
        """Resolve a bearer token to the calling principal."""
        user_id = self.tokens.subject(token)
        with self.storage.locked():
            try:
                account = self.storage.repository_for(Account).get(user_id)
            except ObjectNotFoundError:
                raise Unauthorized("Account no longer exists") from None
        return Principal(user_id=str(account.id), role=account.role)
