"""Delivery areas and delivery staff."""

from datetime import datetime
from flask_login import UserMixin
from cakesbuy.extensions import db, bcrypt
from cakesbuy.utils.helpers import isoformat, money


class DeliveryArea(db.Model):
    """Serviceable pincode with its delivery charges."""
    __tablename__ = 'delivery_areas'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    pincode = db.Column(db.String(6), unique=True, nullable=False, index=True)
    delivery_fee = db.Column(db.Float, default=0.0)
    free_delivery_threshold = db.Column(db.Float, default=500.0)
    same_day_available = db.Column(db.Boolean, default=True)
    midnight_available = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def fee_for(self, subtotal):
        """Delivery charge for an order subtotal."""
        if self.free_delivery_threshold is not None and subtotal >= self.free_delivery_threshold:
            return 0.0
        return money(self.delivery_fee)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'pincode': self.pincode,
            'delivery_fee': money(self.delivery_fee),
            'free_delivery_threshold': money(self.free_delivery_threshold),
            'same_day_available': self.same_day_available,
            'midnight_available': self.midnight_available,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<DeliveryArea {self.pincode}>'


class DeliveryBoy(UserMixin, db.Model):
    """Delivery staff account."""
    __tablename__ = 'delivery_boys'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(15), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120))
    password_hash = db.Column(db.String(255), nullable=False)
    vehicle_type = db.Column(db.String(20), default='bike')  # bike, scooter, car, bicycle
    vehicle_number = db.Column(db.String(20))
    address = db.Column(db.String(500))
    pincode = db.Column(db.String(6))
    is_active = db.Column(db.Boolean, default=True)
    total_deliveries = db.Column(db.Integer, default=0)
    total_earnings = db.Column(db.Float, default=0.0)
    rating = db.Column(db.Float, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = db.relationship('Order', backref='delivery_boy', lazy='dynamic')
    notifications = db.relationship('Notification', backref='delivery_boy', lazy='dynamic',
                                    cascade='all, delete-orphan')

    principal_type = 'delivery_boy'

    def get_id(self):
        return f'delivery_boy:{self.id}'

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def record_delivery(self, order):
        """Credit a completed delivery to this rider."""
        self.total_deliveries = (self.total_deliveries or 0) + 1
        self.total_earnings = money((self.total_earnings or 0) + (order.delivery_fee or 0))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'vehicle_type': self.vehicle_type,
            'vehicle_number': self.vehicle_number,
            'address': self.address,
            'pincode': self.pincode,
            'is_active': self.is_active,
            'total_deliveries': self.total_deliveries,
            'total_earnings': money(self.total_earnings),
            'rating': self.rating,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<DeliveryBoy {self.name}>'
