"""
V1 API Blueprint - podaci o zgradi i generisanje uplatnica.
"""

from flask import Blueprint

# Glavni blueprint za v1 API
bp = Blueprint('api_v1', __name__)


def register_routes():
    """
    Registruje sve sub-blueprinte za v1 API.
    Poziva se iz app factory-ja.
    """
    from . import building, billings

    bp.register_blueprint(building.bp)
    bp.register_blueprint(billings.bp)
