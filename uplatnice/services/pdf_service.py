"""
PDF Service - iscrtavanje uplatnica (Obrazac br. 1).

Koristi ReportLab za PDF generaciju.
A4 strana je podeljena na 3 jednake trake, u svakoj po jedna uplatnica,
izmedju traka isprekidana linija za secenje.

Labele su na srpskoj cirilici, podaci (latinica ili cirilica) kako su uneti,
zato je obavezan Unicode font (DejaVu Sans) - bez fallback-a na Helvetica.

Koordinate se racunaju od vrha strane nadole (kao na papirnom obrascu),
a pretvaraju se u ReportLab koordinate (od dna) tek pri crtanju.
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from typing import Mapping, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from .bank_account import format_for_display
from .ips_service import generate_reference_number, resolve_amount

# ============================================================
# FONTOVI
# ============================================================

FONT_NAME = 'SlipSans'
FONT_NAME_BOLD = 'SlipSans-Bold'
FONT_FILE = 'DejaVuSans.ttf'
FONT_FILE_BOLD = 'DejaVuSans-Bold.ttf'

BUNDLED_FONT_DIR = os.path.join(os.path.dirname(__file__), 'fonts')

# (trazeni font_dir, folder iz kog su fontovi registrovani)
_LOADED_FONTS = None


class FontNotFound(Exception):
    """Izuzetak kada Unicode font za uplatnicu nije dostupan."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


def _packaged_font_dir() -> str:
    """DejaVu Sans koji se isporucuje uz matplotlib distribuciju."""
    import matplotlib
    return os.path.join(matplotlib.get_data_path(), 'fonts', 'ttf')


def _font_dirs(font_dir: Optional[str]):
    if font_dir:
        yield font_dir
    yield BUNDLED_FONT_DIR
    yield _packaged_font_dir()


def load_fonts(font_dir: Optional[str] = None) -> str:
    """
    Registruje DejaVu Sans (regular + bold) u ReportLab.

    Redosled pretrage:
    1. font_dir (SLIP_FONT_DIR)
    2. uplatnice/services/fonts/
    3. fontovi iz matplotlib paketa

    Ponovni poziv sa istim font_dir vraca kesiran folder, a drugi
    font_dir ponovo registruje fontove pod istim imenima.

    Returns:
        Folder iz kog su fontovi ucitani

    Raises:
        FontNotFound: Ako nijedan folder nema oba fajla
    """
    global _LOADED_FONTS

    if _LOADED_FONTS is not None and _LOADED_FONTS[0] == font_dir:
        return _LOADED_FONTS[1]

    tried = []
    for directory in _font_dirs(font_dir):
        tried.append(directory)
        regular = os.path.join(directory, FONT_FILE)
        bold = os.path.join(directory, FONT_FILE_BOLD)
        if os.path.exists(regular) and os.path.exists(bold):
            pdfmetrics.registerFont(TTFont(FONT_NAME, regular))
            pdfmetrics.registerFont(TTFont(FONT_NAME_BOLD, bold))
            _LOADED_FONTS = (font_dir, directory)
            return directory

    raise FontNotFound(
        f"Font {FONT_FILE} / {FONT_FILE_BOLD} nije pronadjen u: {', '.join(tried)}"
    )


# ============================================================
# TEKSTOVI
# ============================================================

LABELS = {
    'title': 'НАЛОГ ЗА УПЛАТУ',
    'payer': 'уплатилац',
    'purpose': 'сврха уплате',
    'recipient': 'прималац',
    'payment_code': 'шифра плаћања',
    'currency': 'валута',
    'amount': 'износ',
    'recipient_account': 'рачун примаоца',
    'model': 'број модела',
    'reference': 'позив на број (одобрење)',
    'payer_signature': 'печат и потпис уплатиоца',
    'date_place': 'место и датум пријема',
    'value_date': 'датум валуте',
    'floor': 'спрат',
    'apartment': 'стан',
}


@dataclass(frozen=True)
class SlipSettings:
    """
    Tekstovi na uplatnici.

    payment_purpose / recipient_prefix: ako nisu postavljeni koriste se
    payment_purpose i recipient_name iz podataka o zgradi.
    """
    payment_purpose: Optional[str] = None
    recipient_prefix: Optional[str] = None
    labels: Mapping[str, str] = field(default_factory=lambda: dict(LABELS))

    @classmethod
    def from_config(cls, config) -> 'SlipSettings':
        return cls(
            payment_purpose=config.get('SLIP_PAYMENT_PURPOSE'),
            recipient_prefix=config.get('SLIP_RECIPIENT_PREFIX'),
        )


def format_display_amount(amount) -> str:
    """Iznos sa srpskim grupisanjem: 3500 → "3.500,00" """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    value = value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    text = f"{value:,.2f}"
    return text.replace(',', ' ').replace('.', ',').replace(' ', '.')


# ============================================================
# LAYOUT
# ============================================================

class SlipLayoutEngine:
    """
    Crta jednu uplatnicu u zadatom slotu (0, 1 ili 2) na A4 strani.

    Svaki korak crtanja prima y-kursor (od vrha strane) i vraca novi,
    pa se delovi layout-a mogu testirati nezavisno.
    """

    PAGE_WIDTH, PAGE_HEIGHT = A4
    SLIPS_PER_PAGE = 3
    SLIP_HEIGHT = PAGE_HEIGHT / SLIPS_PER_PAGE

    MARGIN = 30
    PADDING = 8
    LINE_HEIGHT = 12
    BOX_PADDING = 4

    LABEL_SIZE = 7
    CONTENT_SIZE = 9
    TITLE_SIZE = 11
    LABEL_ADVANCE = 10      # labela + razmak do boxa
    LABEL_LINE_STEP = 9.5   # druga linija labele koja se prelama
    BOX_GAP = 8
    BASELINE_RATIO = 0.9    # baseline u odnosu na vrh linije teksta

    PAYER_BOX_HEIGHT = 42
    PURPOSE_BOX_HEIGHT = 28
    RECIPIENT_BOX_HEIGHT = 28
    TOP_BOX_HEIGHT = 20
    ACCOUNT_BOX_HEIGHT = 18
    MODEL_BOX_HEIGHT = 18

    QR_SIZE = 80
    QR_CROP_BOTTOM = 8      # NBS slike imaju visak belog prostora na dnu
    DATE_LINE_WIDTH = 80

    CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
    LEFT_WIDTH = CONTENT_WIDTH * 0.52
    RIGHT_WIDTH = CONTENT_WIDTH * 0.48
    DIVIDER_X = MARGIN + LEFT_WIDTH

    LABEL_COLOR = colors.HexColor('#666666')
    CUT_LINE_COLOR = colors.HexColor('#666666')
    CUT_LINE_DASH = (5, 3)

    def __init__(self, settings: Optional[SlipSettings] = None):
        self.settings = settings or SlipSettings()

    # --------------------------------------------------------
    # Podaci za prikaz
    # --------------------------------------------------------

    def payer_lines(self, apartment, building) -> list:
        labels = self.settings.labels
        return [
            apartment.owner_name,
            f"{building.address}, {labels['floor']} {apartment.floor_number}, "
            f"{labels['apartment']} {apartment.apartment_number}",
            building.city,
        ]

    def payment_purpose(self, building) -> str:
        return self.settings.payment_purpose or building.payment_purpose

    def recipient_line(self, building) -> str:
        prefix = self.settings.recipient_prefix or building.recipient_name
        return f"{prefix} {building.address}, {building.city}"

    @classmethod
    def slot_offset(cls, slot_index: int) -> float:
        """Udaljenost vrha trake od vrha strane."""
        return slot_index * cls.SLIP_HEIGHT

    # --------------------------------------------------------
    # Glavni ulaz
    # --------------------------------------------------------

    def draw_slip(self, c, apartment, building, period, slot_index: int, qr_image=None):
        """
        Crta uplatnicu za jedan stan.

        Args:
            c: ReportLab canvas (deljen za ceo dokument)
            apartment, building, period: podaci za uplatnicu
            slot_index: 0, 1 ili 2 - pozicija na strani
            qr_image: PNG bajtovi, ImageReader ili None (uplatnica bez QR-a)
        """
        if slot_index not in range(self.SLIPS_PER_PAGE):
            raise ValueError(f"slot_index mora biti 0-2, dobijeno {slot_index}")

        slip_top = self.slot_offset(slot_index) + self.MARGIN
        slip_bottom = self.slot_offset(slot_index) + self.SLIP_HEIGHT - self.MARGIN

        c.saveState()
        c.setStrokeColor(colors.black)
        c.setLineWidth(1)
        self._rect(c, self.MARGIN, slip_top, self.CONTENT_WIDTH, self.SLIP_HEIGHT - 2 * self.MARGIN)

        self._draw_left_section(c, apartment, building, slip_top, slip_bottom)
        self._draw_right_section(c, apartment, building, period, slip_top, slip_bottom, qr_image)
        c.restoreState()

        if slot_index < self.SLIPS_PER_PAGE - 1:
            self.draw_cut_line(c, slot_index)

    def draw_cut_line(self, c, slot_index: int):
        """Isprekidana linija za secenje ispod trake."""
        y = self.slot_offset(slot_index) + self.SLIP_HEIGHT

        c.saveState()
        c.setStrokeColor(self.CUT_LINE_COLOR)
        c.setLineWidth(0.5)
        c.setDash(*self.CUT_LINE_DASH)
        self._line(c, 0, y, self.PAGE_WIDTH, y)
        c.restoreState()

    # --------------------------------------------------------
    # Leva strana - uplatilac, svrha, primalac, potpisi
    # --------------------------------------------------------

    def _draw_left_section(self, c, apartment, building, slip_top, slip_bottom):
        labels = self.settings.labels
        left_x = self.MARGIN + self.PADDING
        left_w = self.LEFT_WIDTH - 2 * self.PADDING
        cursor = slip_top + self.PADDING

        boxes_top = cursor + self.LABEL_ADVANCE
        cursor = self._draw_labeled_box(
            c, left_x, cursor, left_w, self.PAYER_BOX_HEIGHT,
            labels['payer'], self.payer_lines(apartment, building),
        )
        cursor = self._draw_labeled_box(
            c, left_x, cursor + self.BOX_GAP, left_w, self.PURPOSE_BOX_HEIGHT,
            labels['purpose'], [self.payment_purpose(building)],
        )
        boxes_bottom = self._draw_labeled_box(
            c, left_x, cursor + self.BOX_GAP, left_w, self.RECIPIENT_BOX_HEIGHT,
            labels['recipient'], [self.recipient_line(building)],
        )

        # Vertikalna linija tacno uz visinu tri boxa
        c.setLineWidth(0.5)
        self._line(c, self.DIVIDER_X, boxes_top, self.DIVIDER_X, boxes_bottom)

        self._draw_signature_lines(c, left_x, left_w, slip_bottom)

    def _draw_labeled_box(self, c, x, y, width, height, label, lines) -> float:
        """Labela iznad boxa, linije teksta unutra. Vraca dno boxa."""
        self._draw_label(c, label, x, y, width)
        y += self.LABEL_ADVANCE

        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        self._rect(c, x, y, width, height)

        inner_w = width - 2 * self.BOX_PADDING
        max_lines = max(1, int((height - self.BOX_PADDING) // self.LINE_HEIGHT))

        line_y = y + self.BOX_PADDING
        for line in self._wrap_lines(lines, inner_w, max_lines):
            self._draw_text(c, line, x + self.BOX_PADDING, line_y, width=inner_w)
            line_y += self.LINE_HEIGHT

        return y + height

    def _wrap_lines(self, lines, width, max_lines) -> list:
        """Prelama tekst u sirinu boxa; visak ide u poslednju liniju (skracenu sa '…')."""
        wrapped = []
        for line in lines:
            wrapped.extend(simpleSplit(line or '', FONT_NAME, self.CONTENT_SIZE, width) or [''])

        if len(wrapped) > max_lines:
            rest = ' '.join(wrapped[max_lines - 1:])
            wrapped = wrapped[:max_lines - 1] + [rest]
        return wrapped

    def _draw_signature_lines(self, c, left_x, left_w, slip_bottom):
        labels = self.settings.labels
        field_w = left_w / 2 - 10

        signature_y = slip_bottom - 38
        self._draw_caption_line(c, left_x, signature_y, field_w, labels['payer_signature'])

        date_y = slip_bottom - 18
        date_x = left_x + left_w - field_w
        self._draw_caption_line(c, date_x, date_y, field_w, labels['date_place'])

    def _draw_caption_line(self, c, x, y, width, caption):
        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        self._line(c, x, y, x + width, y)
        self._draw_text(c, caption, x, y + 3, size=self.LABEL_SIZE,
                        color=self.LABEL_COLOR, width=width, align='center')

    # --------------------------------------------------------
    # Desna strana - iznos, racun, poziv na broj, QR
    # --------------------------------------------------------

    def _draw_right_section(self, c, apartment, building, period, slip_top, slip_bottom, qr_image):
        right_x = self.DIVIDER_X + self.PADDING
        right_w = self.RIGHT_WIDTH - 2 * self.PADDING
        cursor = slip_top + self.PADDING

        self._draw_text(c, self.settings.labels['title'], right_x, cursor,
                        size=self.TITLE_SIZE, bold=True, width=right_w, align='right')
        cursor += 5

        cursor = self._draw_amount_row(c, apartment, building, right_x, right_w, cursor)
        cursor = self._draw_account_row(c, building, right_x, right_w, cursor)
        self._draw_reference_row(c, apartment, period, right_x, right_w, cursor)

        if qr_image is not None:
            self._draw_qr(c, qr_image, right_x + right_w - self.QR_SIZE,
                          slip_bottom - self.QR_SIZE - 3)

        value_date_y = slip_bottom - 18
        self._draw_caption_line(c, right_x, value_date_y, self.DATE_LINE_WIDTH,
                                self.settings.labels['value_date'])

    def _draw_amount_row(self, c, apartment, building, right_x, right_w, y) -> float:
        """Sifra placanja (prazno) | valuta | iznos."""
        labels = self.settings.labels
        col1_w = (right_w - 4) * 0.15
        col2_w = (right_w - 4) * 0.15
        col3_w = (right_w - 4) * 0.67
        col1_x = right_x
        col2_x = right_x + col1_w + 5
        col3_x = right_x + col1_w + col2_w + 10

        self._draw_label(c, labels['payment_code'], col1_x, y, col1_w)
        self._draw_label(c, labels['currency'], col2_x, y + self.LABEL_LINE_STEP, col2_w)
        self._draw_label(c, labels['amount'], col3_x, y + self.LABEL_LINE_STEP, col3_w)
        y += 20

        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        self._rect(c, col1_x, y, col1_w, self.TOP_BOX_HEIGHT)
        self._rect(c, col2_x, y, col2_w, self.TOP_BOX_HEIGHT)
        self._rect(c, col3_x, y, col3_w, self.TOP_BOX_HEIGHT)

        self._draw_text(c, 'RSD', col2_x + self.BOX_PADDING, y + 5,
                        width=col2_w - 2 * self.BOX_PADDING)
        amount = resolve_amount(apartment, building)
        self._draw_text(c, format_display_amount(amount), col3_x + self.BOX_PADDING, y + 5,
                        width=col3_w - 2 * self.BOX_PADDING, align='right')

        return y + self.TOP_BOX_HEIGHT + self.BOX_GAP

    def _draw_account_row(self, c, building, right_x, right_w, y) -> float:
        """Racun primaoca - desno poravnat, iste sirine kao poziv na broj."""
        width = right_w * 0.85 - 5
        x = right_x + right_w - width

        self._draw_label(c, self.settings.labels['recipient_account'], x, y, width)
        y += self.LABEL_ADVANCE

        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        self._rect(c, x, y, width, self.ACCOUNT_BOX_HEIGHT)
        self._draw_text(c, format_for_display(building.bank_account), x + self.BOX_PADDING, y + 4,
                        width=width - 2 * self.BOX_PADDING)

        return y + self.ACCOUNT_BOX_HEIGHT + self.BOX_GAP

    def _draw_reference_row(self, c, apartment, period, right_x, right_w, y) -> float:
        """Model (prazno) | poziv na broj."""
        labels = self.settings.labels
        model_w = right_w * 0.15 - 5
        model_x = right_x
        ref_x = right_x + model_w + 10
        ref_w = right_w - model_w - 4

        self._draw_label(c, labels['model'], model_x, y, model_w)
        self._draw_label(c, labels['reference'], ref_x, y + self.LABEL_LINE_STEP, ref_w)
        y += 20

        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        self._rect(c, model_x, y, model_w, self.MODEL_BOX_HEIGHT)
        self._rect(c, ref_x, y, ref_w, self.MODEL_BOX_HEIGHT)

        reference = generate_reference_number(apartment.apartment_number, period.month)
        self._draw_text(c, reference, ref_x + self.BOX_PADDING, y + 4,
                        width=ref_w - 2 * self.BOX_PADDING)

        return y + self.MODEL_BOX_HEIGHT + 10

    def _draw_qr(self, c, qr_image, x, y):
        """QR bez okvira, dno odseceno za QR_CROP_BOTTOM."""
        if isinstance(qr_image, (bytes, bytearray)):
            qr_image = ImageReader(BytesIO(qr_image))

        image_bottom = self.PAGE_HEIGHT - y - self.QR_SIZE

        c.saveState()
        path = c.beginPath()
        path.rect(x, image_bottom + self.QR_CROP_BOTTOM, self.QR_SIZE, self.QR_SIZE - self.QR_CROP_BOTTOM)
        c.clipPath(path, stroke=0, fill=0)
        c.drawImage(qr_image, x, image_bottom, width=self.QR_SIZE, height=self.QR_SIZE)
        c.restoreState()

    # --------------------------------------------------------
    # Primitivi (y od vrha strane)
    # --------------------------------------------------------

    def _rect(self, c, x, y, width, height):
        c.rect(x, self.PAGE_HEIGHT - y - height, width, height, stroke=1, fill=0)

    def _line(self, c, x1, y1, x2, y2):
        c.line(x1, self.PAGE_HEIGHT - y1, x2, self.PAGE_HEIGHT - y2)

    def _draw_label(self, c, text, x, y, width):
        """Siva labela; preduga labela se prelama u sledeci red."""
        lines = simpleSplit(text, FONT_NAME, self.LABEL_SIZE, width) or ['']
        for i, line in enumerate(lines):
            self._draw_text(c, line, x, y + i * self.LABEL_LINE_STEP,
                            size=self.LABEL_SIZE, color=self.LABEL_COLOR)

    def _draw_text(self, c, text, x, y, size=None, bold=False, color=colors.black,
                   width=None, align='left'):
        size = size or self.CONTENT_SIZE
        font = FONT_NAME_BOLD if bold else FONT_NAME
        if width is not None:
            text = self._fit_text(text, font, size, width)

        c.setFont(font, size)
        c.setFillColor(color)
        baseline = self.PAGE_HEIGHT - y - size * self.BASELINE_RATIO

        if align == 'right':
            c.drawRightString(x + width, baseline, text)
        elif align == 'center':
            c.drawCentredString(x + width / 2, baseline, text)
        else:
            c.drawString(x, baseline, text)

    @staticmethod
    def _fit_text(text, font, size, width) -> str:
        """Skraćuje tekst sa '…' da stane u sirinu."""
        if pdfmetrics.stringWidth(text, font, size) <= width:
            return text
        ellipsis = '…'
        while text and pdfmetrics.stringWidth(text + ellipsis, font, size) > width:
            text = text[:-1]
        return text.rstrip() + ellipsis
