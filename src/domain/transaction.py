"""Transaction Domain Entity

A single reseller purchase brokered against an upstream provider. Created in
Pending state by order placement and settled by provider webhooks.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import DateTime, Numeric, String
from src.domain.base import BaseModel, utc_now
from src.domain.provider import ProviderName


class TransactionStatus(str, Enum):
    """Transaction settlement status"""
    PENDING = "Pending"
    SUKSES = "Sukses"
    GAGAL = "Gagal"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.SUKSES, TransactionStatus.GAGAL)


class Transaction(BaseModel, table=True):
    """
    Transaction - Unit of webhook reconciliation

    Domain Rules:
    - ref_id is assigned at creation and is globally unique
    - Created in PENDING state outside the webhook pipeline
    - SUKSES and GAGAL are terminal for the webhook pipeline
    - settled_at is stamped once, on the PENDING -> terminal transition
    - Never deleted by the webhook pipeline
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index('ix_transactions_status', 'status'),
        Index('ix_transactions_transacted_by', 'transacted_by'),
    )

    ref_id: str = Field(
        sa_column=Column(String(64), primary_key=True),
        description="Merchant-assigned reference id shared with the provider"
    )

    provider: ProviderName = Field(
        description="Upstream provider handling the transaction"
    )

    buyer_sku_code: str = Field(
        description="Provider product code"
    )

    product_name: str = Field(
        description="Human readable product name"
    )

    details: str = Field(
        default="",
        description="Customer-facing detail string (destination number, meter id, ...)"
    )

    cost_price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Price charged by the provider"
    )

    selling_price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Price charged to the customer"
    )

    status: TransactionStatus = Field(
        default=TransactionStatus.PENDING,
        description="Pending, Sukses or Gagal"
    )

    serial_number: Optional[str] = Field(
        default=None,
        description="Serial number or token returned by the provider"
    )

    failure_reason: Optional[str] = Field(
        default=None,
        description="Provider message when the transaction failed"
    )

    provider_transaction_id: Optional[str] = Field(
        default=None,
        description="Transaction id assigned by the provider"
    )

    transacted_by: str = Field(
        description="Username of the actor who placed the order"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Creation timestamp (UTC)"
    )

    settled_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="When the transaction left PENDING"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "ref_id": "TRX-20240101-0001",
                "provider": "digiflazz",
                "buyer_sku_code": "xld10",
                "product_name": "XL 10.000",
                "details": "081234567890",
                "cost_price": "10150.00",
                "selling_price": "11150.00",
                "status": "Pending",
                "transacted_by": "admin",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }
