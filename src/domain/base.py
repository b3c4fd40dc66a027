from datetime import datetime, timezone
from sqlmodel import SQLModel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


class BaseModel(SQLModel):
    """Base class for all persisted domain entities"""
    pass
