"""Upstream Provider Identifiers

The closed set of PPOB providers whose webhooks the service accepts.
"""

from enum import Enum


class ProviderName(str, Enum):
    """Upstream PPOB providers"""
    DIGIFLAZZ = "digiflazz"
    TOKOVOUCHER = "tokovoucher"

    @property
    def display_name(self) -> str:
        return {
            ProviderName.DIGIFLAZZ: "Digiflazz",
            ProviderName.TOKOVOUCHER: "TokoVoucher",
        }[self]
