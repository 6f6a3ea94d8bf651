"""
Billings API - PDF uplatnice i IPS QR kodovi za obracunski mesec.
"""

from flask import Blueprint, Response, current_app, jsonify
from pydantic import ValidationError

from ..schemas.building import SlipPeriodRequest
from ...models import Building, Apartment
from ...services.bank_account import InvalidFormat
from ...services.billing_context import BillingPeriod
from ...services.ips_service import IPSPayloadBuilder
from ...services.qr_image_service import QRImageError, to_data_url
from ...services.slip_document_service import SlipDocumentService, EmptyInput

bp = Blueprint('billings', __name__, url_prefix='/billings')


def get_qr_provider():
    """QR provider kreiran u app factory-ju (testovi ga zamenjuju)."""
    return current_app.extensions['qr_provider']


def _parse_period(year, month):
    data = SlipPeriodRequest(year=year, month=month)
    return BillingPeriod(month=data.month, year=data.year)


def _validation_error(e: ValidationError):
    return jsonify({
        'error': 'Validation Error',
        'details': e.errors(include_url=False, include_context=False)
    }), 400


@bp.route('/pdf/<int:year>/<int:month>', methods=['GET'])
def download_pdf(year, month):
    """
    PDF sa uplatnicama za sve stanove (3 po A4 strani).

    Returns:
        200: application/pdf kao attachment (uplatnice_{godina}_{mesec}.pdf)
        400: Nevazeci mesec, zgrada nije konfigurisana, nema stanova
             ili je broj racuna zgrade neispravan
    """
    try:
        period = _parse_period(year, month)
    except ValidationError as e:
        return _validation_error(e)

    building = Building.get_building()
    if not building:
        return jsonify({
            'error': 'Bad Request',
            'message': 'Podaci o zgradi nisu konfigurisani'
        }), 400

    apartments = [apt.to_info() for apt in Apartment.query.all()]

    service = SlipDocumentService.from_config(current_app.config, qr_provider=get_qr_provider())
    try:
        document = service.generate(apartments, building.to_info(), period)
    except EmptyInput as e:
        return jsonify({'error': 'Bad Request', 'message': e.message}), 400
    except InvalidFormat as e:
        return jsonify({'error': 'Bad Request', 'message': e.message}), 400

    return Response(
        document.content,
        mimetype='application/pdf',
        headers={
            'Content-Disposition': f'attachment; filename="{document.filename}"',
            'Content-Length': str(len(document.content)),
        }
    )


@bp.route('/qr/<int:apartment_number>/<int:year>/<int:month>', methods=['GET'])
def apartment_qr(apartment_number, year, month):
    """
    IPS QR kod za jedan stan.

    Returns:
        200: payload, NBS tekstualni format i slika kao data URL
        404: Stan ili zgrada ne postoje
        502: QR generator nije dostupan
    """
    try:
        period = _parse_period(year, month)
    except ValidationError as e:
        return _validation_error(e)

    building = Building.get_building()
    apartment = Apartment.query.filter_by(apartment_number=apartment_number).first()
    if not building or not apartment:
        return jsonify({
            'error': 'Not Found',
            'message': 'Resurs nije pronadjen'
        }), 404

    builder = IPSPayloadBuilder(include_payer=current_app.config.get('IPS_INCLUDE_PAYER', True))
    try:
        payload = builder.build_for_apartment(apartment.to_info(), building.to_info(), period)
    except InvalidFormat as e:
        return jsonify({'error': 'Bad Request', 'message': e.message}), 400

    try:
        image = get_qr_provider().fetch(payload, current_app.config.get('QR_IMAGE_SIZE', 200))
    except QRImageError as e:
        current_app.logger.error(f'QR generation failed for apartment {apartment_number}: {e}')
        return jsonify({
            'error': 'Bad Gateway',
            'message': 'Greska prilikom generisanja QR koda'
        }), 502

    return jsonify({
        'apartment_number': apartment_number,
        'payload': payload.to_dict(),
        'ips': payload.to_ips_string(),
        'qr': to_data_url(image),
    })
