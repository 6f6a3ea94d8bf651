"""
Uplatnice - odrzavanje stambene zgrade i generisanje uplatnica sa IPS QR kodom.

Ovaj modul sadrzi app factory funkciju koja kreira i konfigurise
Flask aplikaciju sa svim potrebnim ekstenzijama i blueprintima.
"""

from datetime import date

import click
from flask import Flask, jsonify
from .config import get_config
from .extensions import db, cors


def create_app(config_class=None):
    """
    App factory - kreira i konfigurise Flask aplikaciju.

    Args:
        config_class: Opciona config klasa. Ako nije proslednjena,
                     koristi se config na osnovu FLASK_ENV varijable.

    Returns:
        Konfigurisana Flask aplikacija.
    """
    app = Flask(__name__)

    # Ucitaj konfiguraciju
    if config_class is None:
        config_class = get_config()
    app.config.from_object(config_class)

    # Inicijalizuj ekstenzije
    _init_extensions(app)

    # Registruj blueprinte (API rute)
    _register_blueprints(app)

    # Registruj error handlere
    _register_error_handlers(app)

    # Registruj CLI komande
    _register_cli_commands(app)

    return app


def _init_extensions(app):
    """
    Inicijalizuje sve Flask ekstenzije sa app kontekstom.
    """
    # SQLAlchemy - ORM
    db.init_app(app)

    # CORS - dozvoli cross-origin zahteve
    cors.init_app(app, origins=app.config['CORS_ORIGINS'])

    # QR provider - NBS API ili lokalno generisanje (QR_PROVIDER)
    from .services.qr_image_service import get_qr_image_provider
    app.extensions['qr_provider'] = get_qr_image_provider(app.config)


def _register_blueprints(app):
    """
    Registruje sve API blueprinte.

    Struktura:
    - /api/v1/building - podaci o zgradi
    - /api/v1/billings - PDF uplatnice i QR kodovi
    """
    from .api.v1 import bp as api_v1_bp, register_routes as register_v1_routes
    register_v1_routes()
    app.register_blueprint(api_v1_bp, url_prefix='/api/v1')

    # Zdravstvena provera - uvek dostupna
    @app.route('/health')
    def health_check():
        """Endpoint za health check (load balancer, itd.)"""
        return jsonify({
            'status': 'healthy',
            'service': 'uplatnice'
        })


def _register_error_handlers(app):
    """
    Registruje globalne error handlere za API.
    Svi errori se vracaju kao JSON.
    """
    from .services.pdf_service import FontNotFound

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'error': 'Bad Request',
            'message': str(error.description)
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': 'Resurs nije pronadjen'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': 'Metoda nije dozvoljena'
        }), 405

    @app.errorhandler(FontNotFound)
    def font_not_found(error):
        # Bez Unicode fonta cirilica se ne moze iscrtati - nema fallback-a
        app.logger.error(f'Font error: {error.message}')
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'Greska prilikom generisanja PDF-a'
        }), 500

    @app.errorhandler(500)
    def internal_error(error):
        # Loguj gresku za debugging
        app.logger.error(f'Internal Server Error: {error}')
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'Doslo je do greske na serveru'
        }), 500


def _register_cli_commands(app):
    """
    Registruje custom CLI komande za Flask.
    Koriste se sa: flask <command>
    """

    @app.cli.command('init-db')
    def init_db_command():
        """Kreira tabele u bazi."""
        db.create_all()
        click.echo('Tabele kreirane.')

    @app.cli.command('generate-slips')
    @click.option('--year', type=click.IntRange(2020, date.today().year + 5), required=True, help='Godina')
    @click.option('--month', type=click.IntRange(1, 12), required=True, help='Mesec (1-12)')
    @click.option('--output', type=click.Path(dir_okay=False), default=None,
                  help='Putanja PDF fajla (default: uplatnice_{godina}_{mesec}.pdf)')
    def generate_slips_command(year, month, output):
        """
        Generise PDF sa uplatnicama za sve stanove.

        Primer: flask generate-slips --year 2025 --month 3
        """
        from .models import Building, Apartment
        from .services.billing_context import BillingPeriod
        from .services.slip_document_service import SlipDocumentService

        building = Building.get_building()
        if not building:
            raise click.ClickException('Podaci o zgradi nisu konfigurisani')

        apartments = [apt.to_info() for apt in Apartment.query.all()]
        if not apartments:
            raise click.ClickException('Nema registrovanih stanova')

        click.echo(f'Generisem uplatnice za {month:02d}/{year}...')

        service = SlipDocumentService.from_config(
            app.config, qr_provider=app.extensions['qr_provider']
        )
        document = service.generate(apartments, building.to_info(), BillingPeriod(month=month, year=year))

        path = output or document.filename
        with open(path, 'wb') as f:
            f.write(document.content)

        click.echo(f'Uplatnica: {document.slip_count}, strana: {document.page_count}')
        if document.missing_qr:
            missing = ', '.join(str(n) for n in document.missing_qr)
            click.echo(f'Bez QR koda (stanovi): {missing}')
        click.echo(f'Sacuvano: {path}')
