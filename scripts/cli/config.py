"""CLI configuration: database URL and default actor."""

import os
from uuid import UUID

DEFAULT_DB_URL = "sqlite:///stock.db"
DB_URL = os.environ.get("DATABASE_URL", DEFAULT_DB_URL)

# Actor recorded on writes when --actor is not given.
SYSTEM_ACTOR_ID = UUID(
    os.environ.get("STOCK_CLI_ACTOR_ID", "00000000-0000-0000-0000-000000000001")
)
