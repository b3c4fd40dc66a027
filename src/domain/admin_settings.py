"""Admin Settings Domain Entity

Single-row settings store holding provider credentials, source-IP allow-lists
and the Telegram notification configuration. Values are edited by admins at
runtime, so consumers read them fresh on every use.
"""

from dataclasses import dataclass, field
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel
from src.domain.provider import ProviderName

SETTINGS_ROW_ID = 1


def split_csv(value: Optional[str]) -> list[str]:
    """Split a comma separated setting, trimming entries and dropping blanks"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class AdminSettings(BaseModel, table=True):
    """
    Admin Settings - provider secrets and notification targets

    Domain Rules:
    - Exactly one row (id = SETTINGS_ROW_ID)
    - Allow-lists and chat ids are comma separated; empty means "not set"
    """

    __tablename__ = "admin_settings"

    id: int = Field(default=SETTINGS_ROW_ID, primary_key=True)

    digiflazz_username: Optional[str] = Field(default=None)
    digiflazz_api_key: Optional[str] = Field(default=None)
    digiflazz_allowed_ips: Optional[str] = Field(default=None)

    tokovoucher_member_code: Optional[str] = Field(default=None)
    tokovoucher_key: Optional[str] = Field(default=None)
    tokovoucher_allowed_ips: Optional[str] = Field(default=None)

    telegram_bot_token: Optional[str] = Field(default=None)
    telegram_chat_ids: Optional[str] = Field(default=None)

    def credentials_for(self, provider: ProviderName) -> "ProviderCredentials":
        if provider == ProviderName.DIGIFLAZZ:
            return ProviderCredentials(
                provider=provider,
                secrets=(self.digiflazz_username or "", self.digiflazz_api_key or ""),
                ip_allow_list=split_csv(self.digiflazz_allowed_ips),
            )
        return ProviderCredentials(
            provider=provider,
            secrets=(self.tokovoucher_member_code or "", self.tokovoucher_key or ""),
            ip_allow_list=split_csv(self.tokovoucher_allowed_ips),
        )

    def telegram_settings(self) -> "TelegramSettings":
        return TelegramSettings(
            bot_token=self.telegram_bot_token or None,
            chat_ids=split_csv(self.telegram_chat_ids),
        )


@dataclass(frozen=True)
class ProviderCredentials:
    """Secret material used to authenticate one provider's webhooks"""

    provider: ProviderName
    secrets: tuple[str, ...]
    ip_allow_list: list[str] = field(default_factory=list)

    @property
    def is_configured(self) -> bool:
        return bool(self.secrets) and all(self.secrets)


@dataclass(frozen=True)
class TelegramSettings:
    bot_token: Optional[str] = None
    chat_ids: list[str] = field(default_factory=list)
