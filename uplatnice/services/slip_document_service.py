"""
Slip Document Service - PDF sa uplatnicama za sve stanove.

Tok:
1. Sortiranje stanova po broju
2. IPS payload za svaki stan (neispravan racun prekida ceo zahtev)
3. Paralelno preuzimanje QR slika - greska za jedan stan = uplatnica bez QR-a
4. Crtanje 3 uplatnice po A4 strani
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from io import BytesIO
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .ips_service import IPSPayloadBuilder, generate_reference_number, resolve_amount
from .pdf_service import SlipLayoutEngine, SlipSettings, load_fonts
from .qr_image_service import DEFAULT_QR_SIZE, NBSQRImageProvider, get_qr_image_provider

logger = logging.getLogger(__name__)


class EmptyInput(ValueError):
    """Izuzetak kada nema stanova za generisanje."""
    def __init__(self, message: str = "Nema registrovanih stanova"):
        self.message = message
        super().__init__(self.message)


def generate_pdf_filename(month: int, year: int) -> str:
    """uplatnice_2025_03.pdf"""
    return f"uplatnice_{year}_{month:02d}.pdf"


@dataclass
class SlipPlacement:
    """Pozicija jedne uplatnice u dokumentu."""
    apartment_number: int
    page: int
    slot: int
    reference_number: str
    amount: Decimal
    has_qr: bool


@dataclass
class SlipDocument:
    """Gotov PDF i raspored uplatnica po stranama."""
    content: bytes
    filename: str
    pages: List[List[SlipPlacement]] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def slip_count(self) -> int:
        return sum(len(page) for page in self.pages)

    @property
    def slips(self) -> List[SlipPlacement]:
        return [slip for page in self.pages for slip in page]

    @property
    def missing_qr(self) -> List[int]:
        """Brojevi stanova cije uplatnice nemaju QR kod."""
        return [slip.apartment_number for slip in self.slips if not slip.has_qr]


class SlipDocumentService:
    """
    Generise PDF sa uplatnicama (3 po A4 strani).

    Svaki poziv generate() pravi svoj canvas i svoj thread pool -
    izmedju zahteva se ne deli stanje.
    """

    def __init__(self, qr_provider=None, layout: Optional[SlipLayoutEngine] = None,
                 payload_builder: Optional[IPSPayloadBuilder] = None,
                 qr_size: int = DEFAULT_QR_SIZE, max_workers: int = 8,
                 font_dir: Optional[str] = None):
        self.qr_provider = qr_provider or NBSQRImageProvider()
        self.layout = layout or SlipLayoutEngine()
        self.payload_builder = payload_builder or IPSPayloadBuilder()
        self.qr_size = qr_size
        self.max_workers = max_workers
        self.font_dir = font_dir

    @classmethod
    def from_config(cls, config, qr_provider=None) -> 'SlipDocumentService':
        """Kreira servis iz Flask konfiguracije."""
        return cls(
            qr_provider=qr_provider or get_qr_image_provider(config),
            layout=SlipLayoutEngine(SlipSettings.from_config(config)),
            payload_builder=IPSPayloadBuilder(include_payer=config.get('IPS_INCLUDE_PAYER', True)),
            qr_size=config.get('QR_IMAGE_SIZE', DEFAULT_QR_SIZE),
            max_workers=config.get('QR_MAX_WORKERS', 8),
            font_dir=config.get('SLIP_FONT_DIR'),
        )

    def generate(self, apartments, building, period) -> SlipDocument:
        """
        Generise PDF sa uplatnicama za sve stanove.

        Raises:
            EmptyInput: Prazna lista stanova
            InvalidFormat: Neispravan broj racuna zgrade
            FontNotFound: Unicode font nije dostupan
        """
        if not apartments:
            raise EmptyInput()

        load_fonts(self.font_dir)

        ordered = sorted(apartments, key=lambda apt: apt.apartment_number)

        # Payload pre mreze - InvalidFormat prekida ceo zahtev
        payloads = [
            self.payload_builder.build_for_apartment(apt, building, period)
            for apt in ordered
        ]
        qr_images = self._fetch_qr_images(ordered, payloads)

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=A4)
        c.setTitle(f"Uplatnice {period.month:02d}/{period.year}")

        pages = []
        for i, (apartment, qr_image) in enumerate(zip(ordered, qr_images)):
            slot = i % SlipLayoutEngine.SLIPS_PER_PAGE

            # Nova strana pre 4., 7., ... uplatnice
            if slot == 0:
                if i > 0:
                    c.showPage()
                pages.append([])

            self.layout.draw_slip(c, apartment, building, period, slot, qr_image)
            pages[-1].append(SlipPlacement(
                apartment_number=apartment.apartment_number,
                page=len(pages) - 1,
                slot=slot,
                reference_number=generate_reference_number(apartment.apartment_number, period.month),
                amount=resolve_amount(apartment, building),
                has_qr=qr_image is not None,
            ))

        c.save()

        document = SlipDocument(
            content=buffer.getvalue(),
            filename=generate_pdf_filename(period.month, period.year),
            pages=pages,
        )

        logger.info(
            f"Generated {document.filename}: {document.slip_count} slips on "
            f"{document.page_count} pages, {len(document.missing_qr)} without QR"
        )
        return document

    def _fetch_qr_images(self, apartments, payloads) -> list:
        """Paralelno preuzimanje - rezultat je u istom redosledu kao stanovi."""
        workers = max(1, min(self.max_workers, len(payloads)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self._fetch_one, apartments, payloads))

    def _fetch_one(self, apartment, payload):
        try:
            image_bytes = self.qr_provider.fetch(payload, self.qr_size)
            image = ImageReader(BytesIO(image_bytes))
            image.getSize()
            return image
        except Exception as e:
            # Uplatnica se stampa bez QR koda, ostatak dokumenta ostaje ispravan
            logger.warning(f"QR code unavailable for apartment {apartment.apartment_number}: {e}")
            return None
