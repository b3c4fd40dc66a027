"""SQLAlchemy implementation of SettingsRepository

Reads the single admin settings row on every call.
"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.settings_repository import SettingsRepository
from src.domain.admin_settings import (
    AdminSettings,
    ProviderCredentials,
    TelegramSettings,
    SETTINGS_ROW_ID,
)
from src.domain.provider import ProviderName


class SqlAlchemySettingsRepository(SettingsRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_settings(self) -> Optional[AdminSettings]:
        stmt = select(AdminSettings).where(AdminSettings.id == SETTINGS_ROW_ID)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_provider_credentials(self, provider: ProviderName) -> ProviderCredentials:
        settings = await self._get_settings()
        if settings is None:
            settings = AdminSettings()
        return settings.credentials_for(provider)

    async def get_telegram_settings(self) -> TelegramSettings:
        settings = await self._get_settings()
        if settings is None:
            return TelegramSettings()
        return settings.telegram_settings()
