"""Promo code model."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money


class PromoCode(db.Model):
    """Discount code applied at checkout."""
    __tablename__ = 'promo_codes'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255))
    discount_type = db.Column(db.String(20), nullable=False)  # percentage, fixed
    discount_value = db.Column(db.Float, nullable=False)
    min_order_value = db.Column(db.Float, default=0.0)
    max_discount = db.Column(db.Float)  # Cap for percentage codes
    usage_limit = db.Column(db.Integer)  # Null for unlimited
    used_count = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    valid_from = db.Column(db.DateTime)
    valid_until = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @staticmethod
    def find(code):
        if not code:
            return None
        return PromoCode.query.filter_by(code=code.strip().upper()).first()

    def is_valid(self, order_value):
        """Check if the code applies to an order of the given value."""
        now = datetime.utcnow()

        if not self.is_active:
            return False, 'Promo code is not active'

        if self.valid_from and now < self.valid_from:
            return False, 'Promo code is not yet valid'
        if self.valid_until and now > self.valid_until:
            return False, 'Promo code has expired'

        if self.usage_limit is not None and (self.used_count or 0) >= self.usage_limit:
            return False, 'Promo code usage limit reached'

        if self.min_order_value and order_value < self.min_order_value:
            return False, f'Minimum order value of ₹{self.min_order_value:g} required'

        return True, 'Promo code is valid'

    def calculate_discount(self, order_value):
        """Calculate discount amount."""
        if self.discount_type == 'percentage':
            discount = (order_value * self.discount_value) / 100
            if self.max_discount:
                discount = min(discount, self.max_discount)
            return money(discount)
        else:  # fixed
            return money(min(self.discount_value, order_value))

    @staticmethod
    def validate(code, order_value):
        """Look up a code and check it. Returns (valid, discount, message)."""
        promo = PromoCode.find(code)
        if not promo:
            return False, 0.0, 'Invalid promo code'
        is_valid, message = promo.is_valid(order_value)
        if not is_valid:
            return False, 0.0, message
        return True, promo.calculate_discount(order_value), message

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'description': self.description,
            'discount_type': self.discount_type,
            'discount_value': self.discount_value,
            'min_order_value': money(self.min_order_value),
            'max_discount': self.max_discount,
            'usage_limit': self.usage_limit,
            'used_count': self.used_count,
            'is_active': self.is_active,
            'valid_from': isoformat(self.valid_from),
            'valid_until': isoformat(self.valid_until),
        }

    def __repr__(self):
        return f'<PromoCode {self.code}>'
