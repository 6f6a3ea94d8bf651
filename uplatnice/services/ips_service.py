"""
IPS QR Payload - sastavljanje podataka za QR kod po NBS standardu.

REFERENCE: https://ips.nbs.rs/en/qr-validacija-generisanje

Payload se salje NBS generatoru kao JSON ili se serijalizuje u
NBS tekstualni format (K:PR|V:01|...) za lokalno generisanje.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from .bank_account import parse_bank_account

REFERENCE_DELIMITER = '/'


def resolve_amount(apartment, building) -> Decimal:
    """Iznos za stan - override stana ako postoji, inace podrazumevani iznos zgrade."""
    amount = apartment.override_amount or building.default_amount
    return amount if isinstance(amount, Decimal) else Decimal(str(amount))


def generate_reference_number(apartment_number: int, month: int) -> str:
    """
    Poziv na broj: {stan:02d}/{mesec:02d}.

    Primer: stan 3, februar → "03/02"
    """
    return f"{apartment_number:02d}{REFERENCE_DELIMITER}{month:02d}"


@dataclass
class QRPayloadContext:
    """Ulazni podaci za IPS payload."""
    bank_account: str
    recipient_name: str
    recipient_address: str
    recipient_city: str
    amount: Decimal
    reference_number: str
    payment_purpose: str
    payer_name: str
    payer_address: str
    payer_city: str


class IPSPayload:
    """Uredjen skup IPS tagova (K, V, C, R, N, I, SF, S, RO, P)."""

    # NBS tekstualni format: P ide posle I, pre SF
    TEXT_ORDER = ('K', 'V', 'C', 'R', 'N', 'I', 'P', 'SF', 'S', 'RO')
    SEPARATOR = '|'

    def __init__(self, fields: Dict[str, str]):
        self._fields = dict(fields)

    def __getitem__(self, tag: str) -> str:
        return self._fields[tag]

    def __contains__(self, tag: str) -> bool:
        return tag in self._fields

    def __eq__(self, other):
        return isinstance(other, IPSPayload) and self._fields == other._fields

    def __repr__(self):
        return f"IPSPayload({self._fields!r})"

    def to_dict(self) -> Dict[str, str]:
        """JSON telo za NBS generator."""
        return dict(self._fields)

    def to_ips_string(self) -> str:
        """
        NBS tekstualni format: TAG:vrednost razdvojeno sa |

        Tagovi idu redosledom iz TEXT_ORDER, nepoznati tagovi na kraju.
        Separator unutar vrednosti se menja razmakom.
        """
        tags = [tag for tag in self.TEXT_ORDER if tag in self._fields]
        tags += [tag for tag in self._fields if tag not in self.TEXT_ORDER]
        return self.SEPARATOR.join(
            f"{tag}:{str(self._fields[tag]).replace(self.SEPARATOR, ' ')}" for tag in tags
        )


class IPSPayloadBuilder:
    """
    Sastavlja IPS QR payload prema specifikaciji Narodne Banke Srbije.

    KRITIČNO - NBS pravila:
    - R tag: 18 cifara domaćeg računa, bez crtica
    - N tag: MAX 70 karaktera (naziv + adresa primaoca)
    - I tag: RSD{iznos,decimale} - zarez kao decimalni separator
    - RO tag: poziv na broj bez separatora
    - SF: 289 = ostale komunalne usluge
    """

    PAYMENT_TYPE = 'PR'   # K: nalog za placanje
    IPS_VERSION = '01'    # V
    CHARSET = '1'         # C: UTF-8
    PURPOSE_CODE = '289'  # SF: ostale komunalne usluge
    CURRENCY = 'RSD'

    MAX_RECIPIENT = 70
    LINE_BREAK = '\r\n'

    def __init__(self, include_payer: bool = True):
        self.include_payer = include_payer

    @classmethod
    def format_amount(cls, amount) -> str:
        """
        Formatira iznos za IPS I tag.

        Primeri:
        - 3500 → "RSD3500,00"
        - 3500.5 → "RSD3500,50"
        """
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        value = value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        return f"{cls.CURRENCY}{value:.2f}".replace('.', ',')

    @staticmethod
    def format_reference(reference_number: str) -> str:
        """ "03/02" → "0302" """
        return reference_number.replace(REFERENCE_DELIMITER, '')

    def build(self, context: QRPayloadContext) -> IPSPayload:
        """
        Sastavlja payload iz konteksta.

        Raises:
            InvalidFormat: Ako broj racuna nije validan
        """
        account = parse_bank_account(context.bank_account)

        recipient = f"{context.recipient_name}{self.LINE_BREAK}{context.recipient_address}"
        recipient = recipient[:self.MAX_RECIPIENT]

        fields = {
            'K': self.PAYMENT_TYPE,
            'V': self.IPS_VERSION,
            'C': self.CHARSET,
            'R': account.to_digits(),
            'N': recipient,
            'I': self.format_amount(context.amount),
            'SF': self.PURPOSE_CODE,
            'S': context.payment_purpose,
            'RO': self.format_reference(context.reference_number),
        }

        # P tag je OPCIONALAN - ako se ne uključuje, NE dodajemo prazan tag
        if self.include_payer:
            fields['P'] = self.LINE_BREAK.join(
                [context.payer_name, context.payer_address, context.payer_city]
            )

        return IPSPayload(fields)

    def build_for_apartment(self, apartment, building, period) -> IPSPayload:
        """Payload za uplatnicu jednog stana u datom mesecu."""
        context = QRPayloadContext(
            bank_account=building.bank_account,
            recipient_name=building.recipient_name,
            recipient_address=building.address,
            recipient_city=building.city,
            amount=resolve_amount(apartment, building),
            reference_number=generate_reference_number(apartment.apartment_number, period.month),
            payment_purpose=building.payment_purpose,
            payer_name=apartment.owner_name,
            payer_address=f"{building.address}, {apartment.floor_number}, {apartment.apartment_number}",
            payer_city=building.city,
        )
        return self.build(context)
