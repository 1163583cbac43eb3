"""Vendor (partner bakery) model."""

from datetime import datetime
from flask_login import UserMixin
from cakesbuy.extensions import db, bcrypt
from cakesbuy.utils.helpers import isoformat, money


class Vendor(UserMixin, db.Model):
    """Partner bakery that prepares orders on commission."""
    __tablename__ = 'vendors'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(15), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    business_name = db.Column(db.String(150), nullable=False)
    business_address = db.Column(db.String(500), nullable=False)
    business_license = db.Column(db.String(100))
    gst_number = db.Column(db.String(15))
    pan_number = db.Column(db.String(10))
    bank_details = db.Column(db.JSON)  # account_number, ifsc, account_holder, bank_name
    is_active = db.Column(db.Boolean, default=False)
    is_verified = db.Column(db.Boolean, default=False)
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)
    total_orders_processed = db.Column(db.Integer, default=0)
    total_earnings = db.Column(db.Float, default=0.0)
    rating = db.Column(db.Float, default=0.0)
    commission = db.Column(db.Float, default=0.0)  # percentage
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = db.relationship('Order', backref='vendor', lazy='dynamic')

    principal_type = 'vendor'

    def get_id(self):
        return f'vendor:{self.id}'

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def approve(self, admin):
        self.is_active = True
        self.is_verified = True
        self.approved_by = admin.id
        self.approved_at = datetime.utcnow()

    def record_completed_order(self, order):
        self.total_orders_processed = (self.total_orders_processed or 0) + 1
        self.total_earnings = money((self.total_earnings or 0) + (order.vendor_price or 0))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'business_name': self.business_name,
            'business_address': self.business_address,
            'business_license': self.business_license,
            'gst_number': self.gst_number,
            'pan_number': self.pan_number,
            'is_active': self.is_active,
            'is_verified': self.is_verified,
            'approved_at': isoformat(self.approved_at),
            'total_orders_processed': self.total_orders_processed,
            'total_earnings': money(self.total_earnings),
            'rating': self.rating,
            'commission': self.commission,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Vendor {self.business_name}>'
