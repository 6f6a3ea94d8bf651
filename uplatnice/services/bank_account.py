"""
Bank Account - parsiranje i formatiranje srpskih brojeva racuna.

Format: XXX-XXXXXXXXXXXXX-XX (18 cifara ukupno)
- Prve 3 cifre: sifra banke
- Srednjih 13 cifara: broj partije (dopunjen nulama sleva)
- Poslednje 2 cifre: kontrolni broj

Kontrolni broj se NE proverava (mod 97) - uzima se onako kako je unet.
"""
import re
from dataclasses import dataclass

BANK_CODE_LENGTH = 3
ACCOUNT_LENGTH = 13
CONTROL_LENGTH = 2
FULL_LENGTH = BANK_CODE_LENGTH + ACCOUNT_LENGTH + CONTROL_LENGTH  # 18

# Kratki format: 3 (banka) + bar 2 (partija) + 2 (kontrolni)
MIN_SHORT_LENGTH = 7

_SEPARATORS = re.compile(r'[-\s]')
_DIGITS = re.compile(r'^[0-9]+$')


class InvalidFormat(ValueError):
    """Izuzetak kada broj racuna nije u ispravnom formatu."""
    def __init__(self, message: str = "Nevazeci format broja racuna"):
        self.message = message
        super().__init__(self.message)


@dataclass(frozen=True)
class BankAccount:
    """Normalizovan broj racuna - sva tri dela su fiksne duzine."""
    bank: str
    account: str
    control: str

    def to_display(self) -> str:
        """BBB-AAAAAAAAAAAAA-CC"""
        return f"{self.bank}-{self.account}-{self.control}"

    def to_digits(self) -> str:
        """18 cifara bez crtica (za IPS R tag)."""
        return f"{self.bank}{self.account}{self.control}"

    def __str__(self) -> str:
        return self.to_display()


def parse_bank_account(value) -> BankAccount:
    """
    Parsira broj racuna u kratkom ili punom formatu.

    Podržava formate:
    - 160-0000000548912-67 → 160 / 0000000548912 / 67
    - 160000000054891267 (vec normalizovan)
    - 16054891267 (kratak) → partija se dopunjava nulama do 13 cifara

    Raises:
        InvalidFormat: Prazan unos, ne-cifre ili duzina van [7, 18]
    """
    if not value or not isinstance(value, str):
        raise InvalidFormat("Broj racuna je obavezan")

    digits = _SEPARATORS.sub('', value)

    if not _DIGITS.match(digits):
        raise InvalidFormat("Broj racuna sme da sadrzi samo cifre")

    if len(digits) == FULL_LENGTH:
        return BankAccount(
            bank=digits[:BANK_CODE_LENGTH],
            account=digits[BANK_CODE_LENGTH:BANK_CODE_LENGTH + ACCOUNT_LENGTH],
            control=digits[-CONTROL_LENGTH:],
        )

    if MIN_SHORT_LENGTH <= len(digits) < FULL_LENGTH:
        return BankAccount(
            bank=digits[:BANK_CODE_LENGTH],
            account=digits[BANK_CODE_LENGTH:-CONTROL_LENGTH].zfill(ACCOUNT_LENGTH),
            control=digits[-CONTROL_LENGTH:],
        )

    raise InvalidFormat(
        "Nevazeci format broja racuna. Mora imati 7-18 cifara "
        "(npr. 16054891267 ili 160-0000000548912-67)"
    )


def is_valid_bank_account(value) -> bool:
    """Validira broj racuna - nikad ne baca izuzetak."""
    try:
        parse_bank_account(value)
        return True
    except InvalidFormat:
        return False


def format_for_display(value: str) -> str:
    return parse_bank_account(value).to_display()


def format_for_qr(value: str) -> str:
    return parse_bank_account(value).to_digits()


def get_bank_code(value: str) -> str:
    """Sifra banke (prve 3 cifre)."""
    return parse_bank_account(value).bank
