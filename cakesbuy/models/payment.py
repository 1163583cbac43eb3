"""PhonePe payment transaction model."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money


class PhonePeTransaction(db.Model):
    __tablename__ = 'phonepe_transactions'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    merchant_transaction_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    phonepe_transaction_id = db.Column(db.String(64))
    amount = db.Column(db.Float, nullable=False)  # rupees
    status = db.Column(db.String(20), default='pending')  # pending, initiated, success, failed
    response_code = db.Column(db.String(50))
    response_message = db.Column(db.String(255))
    payment_method = db.Column(db.String(30))
    payment_instrument = db.Column(db.JSON)
    redirect_url = db.Column(db.String(500))
    callback_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = db.relationship('Order', backref=db.backref('phonepe_transactions', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'merchant_transaction_id': self.merchant_transaction_id,
            'phonepe_transaction_id': self.phonepe_transaction_id,
            'amount': money(self.amount),
            'status': self.status,
            'response_code': self.response_code,
            'response_message': self.response_message,
            'payment_method': self.payment_method,
            'redirect_url': self.redirect_url,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<PhonePeTransaction {self.merchant_transaction_id} {self.status}>'
