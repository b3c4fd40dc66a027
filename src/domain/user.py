"""User Domain Entity

Only the fields the webhook pipeline reads: the username that initiates
transactions and the personal Telegram chat that receives their updates.
"""

from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel


class User(BaseModel, table=True):
    __tablename__ = "users"

    username: str = Field(primary_key=True)
    telegram_chat_id: Optional[str] = Field(default=None)
