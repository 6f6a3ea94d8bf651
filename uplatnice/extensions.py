"""
Flask ekstenzije - centralizovana inicijalizacija svih ekstenzija.
Ekstenzije se inicijalizuju ovde, a povezuju sa app-om u __init__.py.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS

# SQLAlchemy - ORM za podatke o zgradi i stanovima
db = SQLAlchemy()

# Flask-CORS - frontend se hostuje kao staticki sajt
cors = CORS()
