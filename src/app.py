"""GameZone FastAPI application.

The domain is initialized at module level so uvicorn workers share it.
PROTEAN_ENV selects the domain.toml overlay (memory provider by default,
PostgreSQL under "production").

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from gamezone.api.app import create_app
from gamezone.config import Settings
from gamezone.domain import gamezone
from gamezone.services import build_services
from gamezone.storage import Storage

gamezone.init()

settings = Settings.from_env()
services = build_services(Storage(gamezone, lock_timeout=settings.store_lock_timeout), settings)

app = create_app(services)
