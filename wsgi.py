"""
Uplatnice - WSGI Entry Point za Gunicorn.

Koristi se u produkciji.
"""

from dotenv import load_dotenv

# Ucitaj .env fajl ako postoji
load_dotenv()

from uplatnice import create_app

app = create_app()
