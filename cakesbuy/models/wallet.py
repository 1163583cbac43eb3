"""Wallet ledger model."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money


class WalletTransaction(db.Model):
    """One movement of a customer's wallet balance."""
    __tablename__ = 'wallet_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)
    # credit, debit, refund, cashback, admin_credit, admin_debit
    amount = db.Column(db.Float, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'))
    admin_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    balance_after = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'amount': money(self.amount),
            'description': self.description,
            'order_id': self.order_id,
            'admin_id': self.admin_id,
            'balance_after': money(self.balance_after),
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<WalletTransaction {self.type} {self.amount}>'
