"""Invoice model."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money, random_code, timestamp_ms, to_base36


INVOICE_TERMS = ('Payment is due within 7 days of the invoice date. '
                 'Cakes are perishable and cannot be returned once delivered.')


class Invoice(db.Model):
    __tablename__ = 'invoices'

    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(40), unique=True, nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    customer_name = db.Column(db.String(100), nullable=False)
    customer_email = db.Column(db.String(120))
    customer_phone = db.Column(db.String(15))
    billing_address = db.Column(db.JSON, nullable=False)
    items = db.Column(db.JSON, nullable=False)  # [{description, quantity, unit_price, total}]
    subtotal = db.Column(db.Float, nullable=False)
    tax_amount = db.Column(db.Float, default=0.0)
    discount_amount = db.Column(db.Float, default=0.0)
    delivery_fee = db.Column(db.Float, default=0.0)
    total_amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), default='sent')  # draft, sent, paid, cancelled
    payment_status = db.Column(db.String(20), default='pending')
    payment_method = db.Column(db.String(20))
    invoice_date = db.Column(db.DateTime, default=datetime.utcnow)
    due_date = db.Column(db.DateTime)
    paid_date = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    terms = db.Column(db.Text, default=INVOICE_TERMS)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    STATUSES = ('draft', 'sent', 'paid', 'cancelled')

    @staticmethod
    def generate_invoice_number():
        number = f'INV-{to_base36(timestamp_ms())}-{random_code(4)}'
        while Invoice.query.filter_by(invoice_number=number).first() is not None:
            number = f'INV-{to_base36(timestamp_ms())}-{random_code(4)}'
        return number

    def set_status(self, status):
        if status not in self.STATUSES:
            raise ValueError('Invalid invoice status')
        self.status = status
        if status == 'paid':
            self.payment_status = 'paid'
            self.paid_date = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'invoice_number': self.invoice_number,
            'order_id': self.order_id,
            'order_number': self.order.order_number if self.order else None,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'billing_address': self.billing_address,
            'items': self.items,
            'subtotal': money(self.subtotal),
            'tax_amount': money(self.tax_amount),
            'discount_amount': money(self.discount_amount),
            'delivery_fee': money(self.delivery_fee),
            'total_amount': money(self.total_amount),
            'status': self.status,
            'payment_status': self.payment_status,
            'payment_method': self.payment_method,
            'invoice_date': isoformat(self.invoice_date),
            'due_date': isoformat(self.due_date),
            'paid_date': isoformat(self.paid_date),
            'notes': self.notes,
            'terms': self.terms,
        }

    def __repr__(self):
        return f'<Invoice {self.invoice_number}>'
