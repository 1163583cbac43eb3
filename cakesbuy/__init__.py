"""Flask application factory."""

import os
from flask import Flask, jsonify, send_from_directory
from .config import config
from .extensions import db, migrate, login_manager, bcrypt, mail
from .utils.logger import configure_logging


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    mail.init_app(app)

    # Create upload directories
    for dir_name in ['images', 'products', 'categories']:
        os.makedirs(os.path.join(app.config['UPLOAD_FOLDER'], dir_name), exist_ok=True)

    # Register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    # Bearer token loader for Flask-Login
    from .models import User, DeliveryBoy, Vendor
    from .utils.tokens import bearer_token, decode_token

    principal_models = {
        'user': User,
        'delivery_boy': DeliveryBoy,
        'vendor': Vendor,
    }

    @login_manager.request_loader
    def load_user_from_request(request):
        token = bearer_token()
        if not token:
            return None
        payload = decode_token(token)
        if not payload:
            return None
        model = principal_models.get(payload.get('type'))
        if model is None:
            return None
        try:
            principal = db.session.get(model, int(payload.get('sub')))
        except (TypeError, ValueError):
            return None
        if principal is None or not principal.is_active:
            return None
        return principal

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'message': 'Authentication required'}), 401

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    # Error handlers
    @app.errorhandler(400)
    def bad_request_error(error):
        return jsonify({'message': getattr(error, 'description', 'Bad request')}), 400

    @app.errorhandler(401)
    def unauthorized_error(error):
        return jsonify({'message': 'Authentication required'}), 401

    @app.errorhandler(403)
    def forbidden_error(error):
        return jsonify({'message': 'Access denied'}), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'message': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({'message': 'Method not allowed'}), 405

    @app.errorhandler(413)
    def too_large_error(error):
        return jsonify({'message': 'File too large'}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'message': 'Internal server error'}), 500

    return app
