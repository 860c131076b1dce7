"""Starter catalogue and admin account."""

from gamezone.identity.access import Principal, Role
from gamezone.identity.account import Account
from gamezone.services import Services
from gamezone.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN = {
    "name": "Admin",
    "email": "admin@gamezone.com",
    "phone": "9999999999",
    "password": "admin123",
}

SEED_PRODUCTS = [
    {
        "name": "GTA VI",
        "description": "Grand Theft Auto VI - The most anticipated game of the decade. "
        "Experience Vice City like never before.",
        "price": 4999,
        "original_price": 5499,
        "platform": "ps5",
        "condition": "new",
        "category": "game",
        "emoji": "🌴",
        "stock": 25,
        "rating": {"average": 4.9, "count": 150},
        "tags": ["action", "open-world", "rockstar"],
        "is_featured": True,
        "is_deal": True,
    },
    {
        "name": "Spider-Man 2",
        "description": "Marvel's Spider-Man 2 - Swing through NYC as both Peter Parker and Miles Morales.",
        "price": 2499,
        "original_price": 3999,
        "platform": "ps5",
        "condition": "excellent",
        "category": "game",
        "emoji": "🕷️",
        "stock": 15,
        "rating": {"average": 4.8, "count": 200},
        "tags": ["action", "superhero", "marvel"],
        "is_featured": True,
        "is_deal": True,
    },
    {
        "name": "God of War Ragnarok",
        "description": "Join Kratos and Atreus on an epic journey through the Nine Realms.",
        "price": 1999,
        "original_price": 3499,
        "platform": "ps5",
        "condition": "good",
        "category": "game",
        "emoji": "⚔️",
        "stock": 10,
        "rating": {"average": 4.9, "count": 300},
        "tags": ["action", "adventure", "mythology"],
        "is_deal": True,
    },
    {
        "name": "Halo Infinite",
        "description": "Master Chief returns in the most expansive Halo game ever.",
        "price": 1499,
        "original_price": 2999,
        "platform": "xbox",
        "condition": "good",
        "category": "game",
        "emoji": "🔫",
        "stock": 12,
        "rating": {"average": 4.3, "count": 100},
        "tags": ["fps", "sci-fi", "multiplayer"],
        "is_deal": True,
    },
    {
        "name": "Zelda: Tears of the Kingdom",
        "description": "Explore the vast lands and skies of Hyrule in this sequel to Breath of the Wild.",
        "price": 3499,
        "original_price": 4499,
        "platform": "nintendo",
        "condition": "new",
        "category": "game",
        "emoji": "🗡️",
        "stock": 20,
        "rating": {"average": 4.9, "count": 250},
        "tags": ["adventure", "rpg", "nintendo"],
        "is_featured": True,
    },
    {
        "name": "FIFA 25",
        "description": "The beautiful game with next-gen HyperMotion technology.",
        "price": 1999,
        "original_price": 3499,
        "platform": "ps5",
        "condition": "like-new",
        "category": "game",
        "emoji": "⚽",
        "stock": 30,
        "rating": {"average": 4.0, "count": 180},
        "tags": ["sports", "football", "multiplayer"],
    },
    {
        "name": "Forza Horizon 5",
        "description": "Explore Mexico's vibrant landscapes in the ultimate racing game.",
        "price": 1799,
        "original_price": 2999,
        "platform": "xbox",
        "condition": "excellent",
        "category": "game",
        "emoji": "🏎️",
        "stock": 8,
        "rating": {"average": 4.7, "count": 160},
        "tags": ["racing", "open-world"],
    },
    {
        "name": "Cyberpunk 2077",
        "description": "Navigate the dangerous streets of Night City in this open-world RPG.",
        "price": 999,
        "original_price": 2499,
        "platform": "pc",
        "condition": "new",
        "category": "game",
        "emoji": "🤖",
        "stock": 50,
        "rating": {"average": 4.5, "count": 220},
        "tags": ["rpg", "open-world", "cyberpunk"],
        "is_deal": True,
    },
    {
        "name": "Elden Ring",
        "description": "A vast world full of mystery and peril created by FromSoftware and George R.R. Martin.",
        "price": 2299,
        "original_price": 3499,
        "platform": "ps5",
        "condition": "excellent",
        "category": "game",
        "emoji": "💍",
        "stock": 14,
        "rating": {"average": 4.8, "count": 350},
        "tags": ["rpg", "souls-like", "open-world"],
        "is_featured": True,
    },
    {
        "name": "Red Dead Redemption 2",
        "description": "Experience the epic tale of outlaw Arthur Morgan in the dying days of America's wild west.",
        "price": 1299,
        "original_price": 2999,
        "platform": "pc",
        "condition": "new",
        "category": "game",
        "emoji": "🤠",
        "stock": 40,
        "rating": {"average": 4.9, "count": 400},
        "tags": ["action", "open-world", "western"],
    },
    {
        "name": "PS5 Console (Pre-Owned)",
        "description": "PlayStation 5 Console - Pre-Owned in excellent condition with controller.",
        "price": 39999,
        "original_price": 49999,
        "platform": "console",
        "condition": "excellent",
        "category": "console",
        "emoji": "🎮",
        "stock": 5,
        "rating": {"average": 4.6, "count": 50},
        "tags": ["console", "playstation"],
        "is_featured": True,
    },
    {
        "name": "Xbox Wireless Controller",
        "description": "Official Xbox Wireless Controller - Carbon Black.",
        "price": 3999,
        "original_price": 5499,
        "platform": "accessories",
        "condition": "new",
        "category": "accessory",
        "emoji": "🎮",
        "stock": 35,
        "rating": {"average": 4.5, "count": 80},
        "tags": ["controller", "xbox", "accessory"],
    },
]


def _admin_account(services: Services) -> Account:
    with services.storage.locked():
        existing = services.storage.repository_for(Account).find_by_email(ADMIN["email"])
    if existing is not None:
        return existing
    return services.accounts.register(role=Role.ADMIN.value, **ADMIN).account


def seed(services: Services) -> list:
    """Create the admin account (if missing) and list the starter products as the admin."""
    admin = _admin_account(services)
    principal = Principal(user_id=str(admin.id), role=admin.role)

    products = [services.catalogue.create(principal, **data) for data in SEED_PRODUCTS]
    logger.info("catalogue_seeded", products=len(products), admin=ADMIN["email"])
    return products
