"""Runtime settings read from the environment.

Protean's own configuration (databases, event processing) lives in
``domain.toml``; these are the application-level knobs the API and the
checkout saga need.
"""

import os
from dataclasses import dataclass

_DEV_SECRET = "gamezone-dev-secret-change-me"


@dataclass(frozen=True)
class Settings:
    jwt_secret: str = _DEV_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = 30
    store_lock_timeout: float = 5.0
    checkout_max_attempts: int = 3
    reconcile_after_seconds: int = 60
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            jwt_secret=os.getenv("JWT_SECRET", _DEV_SECRET),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_ttl_days=int(os.getenv("TOKEN_TTL_DAYS", "30")),
            store_lock_timeout=float(os.getenv("STORE_LOCK_TIMEOUT", "5.0")),
            checkout_max_attempts=int(os.getenv("CHECKOUT_MAX_ATTEMPTS", "3")),
            reconcile_after_seconds=int(os.getenv("RECONCILE_AFTER_SECONDS", "60")),
            cors_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
        )
