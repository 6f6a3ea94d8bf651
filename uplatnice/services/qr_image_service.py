"""
QR Image Service - preuzimanje slike IPS QR koda.

NBSQRImageProvider salje payload NBS generatoru:
    POST https://nbs.rs/QRcode/api/qr/v1/gen/{velicina}
    Content-Type: application/json, Accept: image/png

LocalQRImageProvider generise isti QR lokalno (qrcode biblioteka)
iz NBS tekstualnog formata - za rad bez mreze.

Nema retry-ja - jedan pokusaj po pozivu.
"""
import base64
import logging
from io import BytesIO

import qrcode
import requests
from qrcode.constants import ERROR_CORRECT_M

logger = logging.getLogger(__name__)

DEFAULT_QR_SIZE = 200


class QRImageError(Exception):
    """Bazna klasa za greske pri preuzimanju QR slike."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NetworkError(QRImageError):
    """Greska u transportu (DNS, timeout, konekcija)."""


class UpstreamError(QRImageError):
    """NBS servis je vratio status koji nije 2xx."""
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"NBS API error: {status_code} - {body}")


class NBSQRImageProvider:
    """Generise QR sliku preko NBS API-ja."""

    DEFAULT_API_URL = "https://nbs.rs/QRcode/api/qr/v1/gen"
    TIMEOUT = 10

    def __init__(self, api_url: str = None, timeout: float = None, session=None):
        self.api_url = (api_url or self.DEFAULT_API_URL).rstrip('/')
        self.timeout = timeout or self.TIMEOUT
        self.session = session or requests.Session()

    def fetch(self, payload, size: int = DEFAULT_QR_SIZE) -> bytes:
        """
        Salje payload i vraca PNG bajtove.

        Raises:
            UpstreamError: Status odgovora nije uspesan (sadrzi status i telo)
            NetworkError: Greska u transportu
        """
        url = f"{self.api_url}/{size}"
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'image/png',
        }

        try:
            response = self.session.post(
                url, json=payload.to_dict(), headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"Failed to reach NBS QR generator: {e}") from e

        if not response.ok:
            raise UpstreamError(response.status_code, response.text)

        return response.content


class LocalQRImageProvider:
    """Generise QR kod lokalno iz NBS tekstualnog formata."""

    def __init__(self, border: int = 4):
        self.border = border

    def fetch(self, payload, size: int = DEFAULT_QR_SIZE) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_M,
            box_size=10,
            border=self.border,
        )
        qr.add_data(payload.to_ips_string())
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        img = img.resize((size, size))

        buffer = BytesIO()
        img.save(buffer, format='PNG')
        return buffer.getvalue()


def get_qr_image_provider(config):
    """
    Kreira provider na osnovu konfiguracije (QR_PROVIDER: 'nbs' ili 'local').

    Args:
        config: Mapping (npr. app.config)
    """
    kind = (config.get('QR_PROVIDER') or 'nbs').lower()

    if kind == 'local':
        return LocalQRImageProvider()
    if kind == 'nbs':
        return NBSQRImageProvider(
            api_url=config.get('NBS_QR_API_URL'),
            timeout=config.get('QR_REQUEST_TIMEOUT'),
        )

    raise ValueError(f"Nepoznat QR_PROVIDER: {kind}")


def to_data_url(png_bytes: bytes) -> str:
    """PNG kao base64 data URL."""
    b64 = base64.b64encode(png_bytes).decode('utf-8')
    return f"data:image/png;base64,{b64}"
