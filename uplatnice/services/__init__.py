"""
Services - generisanje uplatnica.

Servisi ne zavise od Flask-a niti baze - rade nad podacima o zgradi,
stanovima i obracunskom mesecu.
"""

from .bank_account import BankAccount, InvalidFormat, parse_bank_account, is_valid_bank_account
from .billing_context import BuildingInfo, ApartmentInfo, BillingPeriod
from .ips_service import IPSPayload, IPSPayloadBuilder, generate_reference_number, resolve_amount
from .qr_image_service import (
    QRImageError, NetworkError, UpstreamError,
    NBSQRImageProvider, LocalQRImageProvider, get_qr_image_provider,
)
from .pdf_service import SlipLayoutEngine, SlipSettings, FontNotFound, load_fonts
from .slip_document_service import (
    SlipDocumentService, SlipDocument, EmptyInput, generate_pdf_filename,
)

__all__ = [
    'BankAccount',
    'InvalidFormat',
    'parse_bank_account',
    'is_valid_bank_account',
    'BuildingInfo',
    'ApartmentInfo',
    'BillingPeriod',
    'IPSPayload',
    'IPSPayloadBuilder',
    'generate_reference_number',
    'resolve_amount',
    'QRImageError',
    'NetworkError',
    'UpstreamError',
    'NBSQRImageProvider',
    'LocalQRImageProvider',
    'get_qr_image_provider',
    'SlipLayoutEngine',
    'SlipSettings',
    'FontNotFound',
    'load_fonts',
    'SlipDocumentService',
    'SlipDocument',
    'EmptyInput',
    'generate_pdf_filename',
]
