"""Price Setting Repository Interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from src.domain.provider import ProviderName


class PriceSettingRepository(ABC):

    @abstractmethod
    async def get_custom_price(self, product_code: str, provider: ProviderName) -> Optional[Decimal]:
        """
        Retrieve the admin-configured selling price for a product

        Returns:
            Custom price if configured, None otherwise
        """
        pass
