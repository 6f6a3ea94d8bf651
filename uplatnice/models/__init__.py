"""
SQLAlchemy modeli.

Ovaj modul exportuje sve modele kako bi bili dostupni
za import iz uplatnice.models.
"""

from .building import Building, Apartment

__all__ = [
    'Building',
    'Apartment',
]
