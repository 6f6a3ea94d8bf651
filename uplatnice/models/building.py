"""
Building i Apartment modeli - podaci o zgradi i stanovima.

Zgrada je singleton - postoji samo jedan red u tabeli (id=1).
"""

from datetime import datetime, timezone
from decimal import Decimal
from ..extensions import db
from ..services.billing_context import BuildingInfo, ApartmentInfo


class Building(db.Model):
    """
    Podaci o zgradi - primalac svih uplata.
    Singleton - uvek koristi Building.get_building()
    """
    __tablename__ = 'building'

    id = db.Column(db.Integer, primary_key=True)

    address = db.Column(db.String(200), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    bank_account = db.Column(db.String(50), nullable=False)  # BBB-AAAAAAAAAAAAA-CC
    default_amount = db.Column(db.Numeric(10, 2), nullable=False)  # RSD mesecno
    recipient_name = db.Column(db.String(200), nullable=False, default='Stambena zajednica')
    payment_purpose = db.Column(db.String(200), nullable=False, default='Mesecno odrzavanje zgrade')

    # Timestamps
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=lambda: datetime.now(timezone.utc))

    @classmethod
    def get_building(cls):
        """Vraca podatke o zgradi ili None ako nisu konfigurisani."""
        return db.session.get(cls, 1)

    def to_info(self) -> BuildingInfo:
        return BuildingInfo(
            address=self.address,
            city=self.city,
            bank_account=self.bank_account,
            default_amount=Decimal(self.default_amount),
            recipient_name=self.recipient_name,
            payment_purpose=self.payment_purpose,
        )

    def to_dict(self):
        return {
            'address': self.address,
            'city': self.city,
            'bank_account': self.bank_account,
            'default_amount': float(self.default_amount),
            'recipient_name': self.recipient_name,
            'payment_purpose': self.payment_purpose,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Building {self.address}, {self.city}>'


class Apartment(db.Model):
    """Stan - platilac mesecnog odrzavanja."""
    __tablename__ = 'apartments'

    id = db.Column(db.Integer, primary_key=True)

    apartment_number = db.Column(db.Integer, nullable=False, unique=True, index=True)  # 1-99
    owner_name = db.Column(db.String(200), nullable=False)
    floor_number = db.Column(db.Integer, nullable=False)
    # Ako je postavljen, zamenjuje podrazumevani iznos zgrade
    override_amount = db.Column(db.Numeric(10, 2), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_info(self) -> ApartmentInfo:
        return ApartmentInfo(
            apartment_number=self.apartment_number,
            owner_name=self.owner_name,
            floor_number=self.floor_number,
            override_amount=Decimal(self.override_amount) if self.override_amount is not None else None,
        )

    def __repr__(self):
        return f'<Apartment {self.apartment_number}>'
