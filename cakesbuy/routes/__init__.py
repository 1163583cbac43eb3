"""Routes package - register all blueprints."""

from flask import Flask


def register_blueprints(app: Flask):
    """Register all blueprints with the application."""
    from .auth import auth_bp
    from .main import main_bp
    from .customer import customer_bp
    from .orders import orders_bp
    from .wallet import wallet_bp
    from .admin import admin_bp
    from .delivery import delivery_bp
    from .vendor import vendor_bp
    from .payments import payments_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(main_bp, url_prefix='/api')
    app.register_blueprint(customer_bp, url_prefix='/api')
    app.register_blueprint(orders_bp, url_prefix='/api')
    app.register_blueprint(wallet_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(delivery_bp, url_prefix='/api/delivery')
    app.register_blueprint(vendor_bp, url_prefix='/api/vendors')
    app.register_blueprint(payments_bp)
