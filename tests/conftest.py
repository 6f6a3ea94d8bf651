"""
Test fixtures za generisanje uplatnica.

Setup: zgrada "Marka Čelebonovića 73" sa racunom u kratkom formatu
i nekoliko stanova. QR provider je lokalni ili lazni - testovi nikad
ne pozivaju NBS API.
"""
import pytest
from decimal import Decimal

from uplatnice import create_app
from uplatnice.config import TestingConfig
from uplatnice.extensions import db as _db
from uplatnice.models import Building, Apartment
from uplatnice.services.billing_context import BuildingInfo, ApartmentInfo, BillingPeriod
from uplatnice.services.qr_image_service import LocalQRImageProvider, UpstreamError


class SlipTestConfig(TestingConfig):
    """Override za testove - lokalni QR i mala slika."""
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    QR_PROVIDER = 'local'
    QR_IMAGE_SIZE = 120


class FakeQRProvider:
    """
    QR provider za testove - vraca pravi PNG, a za stanove iz
    `failing` baca UpstreamError (simulacija pada NBS servisa).
    """

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []
        self._local = LocalQRImageProvider()

    def fetch(self, payload, size=200):
        self.calls.append(payload)
        apartment_number = int(payload['RO'][:2])
        if apartment_number in self.failing:
            raise UpstreamError(503, 'Service Unavailable')
        return self._local.fetch(payload, size)


@pytest.fixture(scope='session')
def app():
    """Kreira Flask app za testove."""
    app = create_app(SlipTestConfig)
    yield app


@pytest.fixture(scope='function')
def db(app):
    """Kreira čistu bazu za svaki test."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    return app.test_client()


@pytest.fixture
def fake_qr(app):
    """Zamenjuje QR provider aplikacije laznim."""
    original = app.extensions['qr_provider']
    provider = FakeQRProvider()
    app.extensions['qr_provider'] = provider
    yield provider
    app.extensions['qr_provider'] = original


@pytest.fixture
def building_info():
    return BuildingInfo(
        address='Marka Čelebonovića 73',
        city='Beograd',
        bank_account='16054891267',
        default_amount=Decimal('3500.00'),
        recipient_name='Stambena zajednica',
        payment_purpose='Mesečno održavanje zgrade',
    )


@pytest.fixture
def apartment_info():
    return ApartmentInfo(apartment_number=5, owner_name='Petar Petrović', floor_number=2)


@pytest.fixture
def period():
    return BillingPeriod(month=3, year=2025)


@pytest.fixture
def building(db):
    """Zgrada u bazi (singleton, id=1)."""
    b = Building(
        id=1,
        address='Marka Čelebonovića 73',
        city='Beograd',
        bank_account='160-0000000548912-67',
        default_amount=Decimal('3500.00'),
        recipient_name='Stambena zajednica',
        payment_purpose='Mesečno održavanje zgrade',
    )
    db.session.add(b)
    db.session.commit()
    return b


@pytest.fixture
def apartments(db):
    """Četiri stana, namerno nesortirana - stan 4 ima poseban iznos."""
    items = [
        Apartment(apartment_number=7, owner_name='Јована Јовановић', floor_number=3),
        Apartment(apartment_number=2, owner_name='Marko Marković', floor_number=1),
        Apartment(apartment_number=4, owner_name='Ana Anić', floor_number=1,
                  override_amount=Decimal('4200.00')),
        Apartment(apartment_number=5, owner_name='Petar Petrović', floor_number=2),
    ]
    db.session.add_all(items)
    db.session.commit()
    return items


@pytest.fixture
def make_qr_provider():
    """Fabrika laznih QR providera: make_qr_provider(failing={3})."""
    return FakeQRProvider
