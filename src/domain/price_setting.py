"""Price Setting Domain Entity

Admin-configured selling price override for a provider product, plus the
default tiered markup used when no override exists.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel
from src.domain.provider import ProviderName

LOW_TIER_CEILING = Decimal("20000")
MID_TIER_CEILING = Decimal("50000")


class PriceSetting(BaseModel, table=True):
    """Custom selling price keyed by product code and provider"""

    __tablename__ = "price_settings"

    product_code: str = Field(
        sa_column=Column(String(64), primary_key=True),
        description="Provider product code (buyer_sku_code)"
    )

    provider: ProviderName = Field(
        sa_column=Column(String(32), primary_key=True),
        description="Provider the product belongs to"
    )

    price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Selling price override"
    )


def calculate_selling_price(cost_price: Decimal, custom_price: Optional[Decimal] = None) -> Decimal:
    """
    Selling price for a product given its cost

    A positive custom price wins; otherwise the markup tier of the cost applies:
    below 20.000 adds 1.000, 20.000 to 50.000 adds 1.500, above adds 2.000.
    """
    if custom_price is not None and custom_price > 0:
        return custom_price

    if cost_price < LOW_TIER_CEILING:
        return cost_price + Decimal("1000")
    if cost_price <= MID_TIER_CEILING:
        return cost_price + Decimal("1500")
    return cost_price + Decimal("2000")
