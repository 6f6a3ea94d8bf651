"""
Building schemas - Pydantic modeli za validaciju podataka o zgradi
i parametara za generisanje uplatnica.
"""

from datetime import date
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator

from ...services.bank_account import is_valid_bank_account, format_for_display

MAX_YEARS_AHEAD = 5


# =============================================================================
# REQUEST SCHEMAS (ulazni podaci)
# =============================================================================

class BuildingRequest(BaseModel):
    """
    Schema za izmenu podataka o zgradi.

    Broj racuna se prihvata u kratkom ili punom formatu,
    a cuva se u formatu BBB-AAAAAAAAAAAAA-CC.
    """
    address: str = Field(..., min_length=1, max_length=200, description="Adresa zgrade")
    city: str = Field(..., min_length=1, max_length=100, description="Grad")
    bank_account: str = Field(..., min_length=1, max_length=50, description="Broj racuna (npr. 16054891267)")
    default_amount: Decimal = Field(..., ge=Decimal('0.01'), decimal_places=2, description="Mesecni iznos RSD")
    recipient_name: str = Field(..., min_length=1, max_length=200, description="Naziv primaoca")
    payment_purpose: str = Field(..., min_length=1, max_length=200, description="Svrha uplate")

    @field_validator('address', 'city', 'recipient_name', 'payment_purpose', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('bank_account')
    @classmethod
    def validate_bank_account(cls, v):
        """Broj racuna mora imati 7-18 cifara (crtice i razmaci su dozvoljeni)."""
        if not is_valid_bank_account(v):
            raise ValueError('Nevazeci format broja racuna (npr. 16054891267 ili 160-0000000548912-67)')
        return format_for_display(v)


class SlipPeriodRequest(BaseModel):
    """Obracunski mesec iz URL-a."""
    year: int = Field(..., ge=2020)
    month: int = Field(..., ge=1, le=12)

    @field_validator('year')
    @classmethod
    def validate_year(cls, v):
        """Najvise 5 godina unapred."""
        max_year = date.today().year + MAX_YEARS_AHEAD
        if v > max_year:
            raise ValueError(f'Godina mora biti najvise {max_year}')
        return v
