from .transaction_repository import TransactionRepository
from .settings_repository import SettingsRepository
from .price_setting_repository import PriceSettingRepository
from .user_repository import UserRepository

__all__ = [
    "TransactionRepository",
    "SettingsRepository",
    "PriceSettingRepository",
    "UserRepository",
]
