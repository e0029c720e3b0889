from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    """Timezone-aware default for timestamp columns."""
    return datetime.now(timezone.utc)
