"""
Podaci koje generator uplatnica dobija spolja.

Servisi rade sa ovim dataclass-ovima ili sa bilo kojim objektom
koji ima ista polja (npr. SQLAlchemy modeli).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

MIN_BILLING_YEAR = 2020


@dataclass
class BuildingInfo:
    """Podaci o zgradi (primalac uplate)."""
    address: str
    city: str
    bank_account: str
    default_amount: Decimal
    recipient_name: str = "Stambena zajednica"
    payment_purpose: str = "Mesecno odrzavanje zgrade"


@dataclass
class ApartmentInfo:
    """Podaci o stanu (platilac)."""
    apartment_number: int
    owner_name: str
    floor_number: int
    override_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class BillingPeriod:
    """Obracunski mesec."""
    month: int
    year: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Mesec mora biti izmedju 1 i 12, dobijeno {self.month}")
        if self.year < MIN_BILLING_YEAR:
            raise ValueError(f"Godina mora biti {MIN_BILLING_YEAR} ili kasnije, dobijeno {self.year}")
