"""
Konfiguracija aplikacije - podesavanja za razlicita okruzenja.
Ucitava vrednosti iz environment varijabli sa fallback na defaults.
"""

import os
from dotenv import load_dotenv

# Ucitaj .env fajl ako postoji
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """
    Bazna konfiguracija - zajednicka podesavanja za sva okruzenja.
    """

    # Flask core
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database - jedna zgrada, SQLite je dovoljan
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///uplatnice.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*').split(',')

    # ========================
    # IPS QR
    # ========================

    # NBS generator QR koda (POST {url}/{velicina}, JSON telo, vraca PNG)
    NBS_QR_API_URL = os.getenv('NBS_QR_API_URL', 'https://nbs.rs/QRcode/api/qr/v1/gen')

    # 'nbs' = NBS API, 'local' = lokalno generisanje (qrcode biblioteka)
    QR_PROVIDER = os.getenv('QR_PROVIDER', 'nbs')

    # Velicina generisane slike u pikselima (veca od prikaza zbog detalja)
    QR_IMAGE_SIZE = int(os.getenv('QR_IMAGE_SIZE', 130))
    QR_REQUEST_TIMEOUT = float(os.getenv('QR_REQUEST_TIMEOUT', 10))
    QR_MAX_WORKERS = int(os.getenv('QR_MAX_WORKERS', 8))

    # P tag je opcioni po NBS uputstvu - False = izostavi podatke o platiocu
    IPS_INCLUDE_PAYER = _env_bool('IPS_INCLUDE_PAYER', 'true')

    # ========================
    # UPLATNICA
    # ========================

    # Folder sa DejaVuSans.ttf i DejaVuSans-Bold.ttf (opciono)
    SLIP_FONT_DIR = os.getenv('SLIP_FONT_DIR') or None

    # Ako nije postavljeno, koriste se tekstovi iz podataka o zgradi
    SLIP_PAYMENT_PURPOSE = os.getenv('SLIP_PAYMENT_PURPOSE') or None
    SLIP_RECIPIENT_PREFIX = os.getenv('SLIP_RECIPIENT_PREFIX') or None


class DevelopmentConfig(Config):
    """
    Razvojna konfiguracija - debug mode ukljucen.
    """
    DEBUG = True


class TestingConfig(Config):
    """
    Test konfiguracija - koristi se za pytest.
    """
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    QR_PROVIDER = 'local'
    QR_MAX_WORKERS = 2


class ProductionConfig(Config):
    """
    Produkciona konfiguracija.
    """
    DEBUG = False
    SECRET_KEY = os.getenv('SECRET_KEY', '')


# Mapiranje imena okruzenja na config klase
config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """
    Vraca config klasu na osnovu FLASK_ENV environment varijable.
    Default je development.
    """
    env = os.getenv('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)
