"""Role-based access decorators, stacked under @login_required."""

from functools import wraps
from flask import jsonify
from flask_login import current_user


def _principal_is(kind):
    return getattr(current_user, 'principal_type', None) == kind


def customer_required(f):
    """Decorator to require a customer or admin account."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _principal_is('user'):
            return jsonify({'message': 'Customer account required'}), 403
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require admin role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _principal_is('user') or not current_user.is_admin():
            return jsonify({'message': 'Admin access required'}), 403
        return f(*args, **kwargs)
    return decorated_function


def delivery_required(f):
    """Decorator to require a delivery boy token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _principal_is('delivery_boy'):
            return jsonify({'message': 'Delivery partner access required'}), 403
        return f(*args, **kwargs)
    return decorated_function


def vendor_required(f):
    """Decorator to require an approved vendor token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _principal_is('vendor'):
            return jsonify({'message': 'Vendor access required'}), 403
        return f(*args, **kwargs)
    return decorated_function
