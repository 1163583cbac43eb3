"""JWT helpers for bearer authentication."""

from datetime import datetime, timedelta
import jwt
from flask import current_app, request


def create_token(principal):
    """Issue a signed token for a User, DeliveryBoy or Vendor."""
    now = datetime.utcnow()
    payload = {
        'sub': str(principal.id),
        'type': principal.principal_type,
        'iat': now,
        'exp': now + timedelta(days=current_app.config['JWT_EXPIRES_DAYS']),
    }
    if principal.principal_type == 'user':
        payload['role'] = principal.role
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def decode_token(token):
    """Return the payload of a valid token, or None."""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.PyJWTError:
        return None


def bearer_token():
    """Token from the Authorization header of the current request."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return None
    return token.strip()
