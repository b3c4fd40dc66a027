from .transaction_repository import SqlAlchemyTransactionRepository
from .settings_repository import SqlAlchemySettingsRepository
from .price_setting_repository import SqlAlchemyPriceSettingRepository
from .user_repository import SqlAlchemyUserRepository

__all__ = [
    "SqlAlchemyTransactionRepository",
    "SqlAlchemySettingsRepository",
    "SqlAlchemyPriceSettingRepository",
    "SqlAlchemyUserRepository",
]
