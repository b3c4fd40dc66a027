from .base import BaseModel
from .provider import ProviderName
from .transaction import Transaction, TransactionStatus
from .admin_settings import AdminSettings, ProviderCredentials, TelegramSettings
from .price_setting import PriceSetting, calculate_selling_price
from .user import User

__all__ = [
    "BaseModel",
    "ProviderName",
    "Transaction",
    "TransactionStatus",
    "AdminSettings",
    "ProviderCredentials",
    "TelegramSettings",
    "PriceSetting",
    "calculate_selling_price",
    "User",
]
