"""Settings Repository Interface

Read access to admin-managed settings. Implementations must not cache across
calls since admins may change settings at any time.
"""

from abc import ABC, abstractmethod
from src.domain.admin_settings import ProviderCredentials, TelegramSettings
from src.domain.provider import ProviderName


class SettingsRepository(ABC):

    @abstractmethod
    async def get_provider_credentials(self, provider: ProviderName) -> ProviderCredentials:
        """
        Load webhook credentials for a provider

        Returns unconfigured (empty) credentials when no settings exist yet.
        """
        pass

    @abstractmethod
    async def get_telegram_settings(self) -> TelegramSettings:
        """Load the Telegram bot token and admin chat ids"""
        pass
