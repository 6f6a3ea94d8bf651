"""
Building API - podaci o zgradi (primalac uplata).
"""

from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from ..schemas.building import BuildingRequest
from ...models import Building
from ...extensions import db

bp = Blueprint('building', __name__, url_prefix='/building')


@bp.route('', methods=['GET'])
def get_building():
    """
    Podaci o zgradi.

    Returns:
        200: Podaci o zgradi
        404: Zgrada nije konfigurisana
    """
    building = Building.get_building()
    if not building:
        return jsonify({
            'error': 'Not Found',
            'message': 'Podaci o zgradi nisu konfigurisani'
        }), 404

    return jsonify(building.to_dict())


@bp.route('', methods=['PUT'])
def update_building():
    """
    Izmena podataka o zgradi (upsert singleton reda).

    Request body:
        - address, city: Adresa i grad zgrade
        - bank_account: Broj racuna (kratak ili pun format)
        - default_amount: Podrazumevani mesecni iznos
        - recipient_name: Naziv primaoca
        - payment_purpose: Svrha uplate

    Returns:
        200: Azurirani podaci
        400: Validaciona greska
    """
    try:
        data = BuildingRequest(**(request.get_json(silent=True) or {}))
    except ValidationError as e:
        return jsonify({
            'error': 'Validation Error',
            'details': e.errors(include_url=False, include_context=False)
        }), 400

    building = Building.get_building()
    if not building:
        building = Building(id=1)
        db.session.add(building)

    building.address = data.address
    building.city = data.city
    building.bank_account = data.bank_account
    building.default_amount = data.default_amount
    building.recipient_name = data.recipient_name
    building.payment_purpose = data.payment_purpose

    db.session.commit()

    return jsonify(building.to_dict())
