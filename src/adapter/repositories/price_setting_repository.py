"""SQLAlchemy implementation of PriceSettingRepository"""

from decimal import Decimal
from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.price_setting_repository import PriceSettingRepository
from src.domain.price_setting import PriceSetting
from src.domain.provider import ProviderName


class SqlAlchemyPriceSettingRepository(PriceSettingRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_custom_price(self, product_code: str, provider: ProviderName) -> Optional[Decimal]:
        stmt = select(PriceSetting).where(
            PriceSetting.product_code == product_code,
            PriceSetting.provider == ProviderName(provider).value,
        )
        result = await self.session.execute(stmt)
        setting = result.scalar_one_or_none()
        return setting.price if setting else None
