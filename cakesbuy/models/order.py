"""Order models."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money, random_digits, timestamp_ms
from .notification import Notification


ORDER_STATUSES = ['pending', 'confirmed', 'preparing', 'out_for_delivery', 'delivered', 'cancelled']

# Allowed moves out of each status; delivered and cancelled are terminal
ORDER_TRANSITIONS = {
    'pending': ('confirmed', 'cancelled'),
    'confirmed': ('preparing', 'cancelled'),
    'preparing': ('out_for_delivery', 'cancelled'),
    'out_for_delivery': ('delivered',),
    'delivered': (),
    'cancelled': (),
}

PAYMENT_METHODS = ['cod', 'upi', 'card', 'phonepe', 'wallet', 'partial_wallet']
PAYMENT_STATUSES = ['pending', 'paid', 'failed', 'refunded']


class Order(db.Model):
    """Order model."""
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(50), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)  # Null for guest checkout

    # Pricing
    subtotal = db.Column(db.Float, default=0.0)
    delivery_fee = db.Column(db.Float, default=0.0)
    discount = db.Column(db.Float, default=0.0)
    wallet_amount_used = db.Column(db.Float, default=0.0)
    total = db.Column(db.Float, nullable=False)

    # Status
    status = db.Column(db.String(30), default='pending', index=True)

    # Payment
    payment_method = db.Column(db.String(20), default='cod')
    payment_status = db.Column(db.String(20), default='pending')

    # Delivery details, snapshot of name, phone, email, address, pincode, city, landmark
    delivery_address = db.Column(db.JSON, nullable=False)
    delivery_date = db.Column(db.String(10))
    delivery_time = db.Column(db.String(50))
    delivery_occasion = db.Column(db.String(50))
    relation = db.Column(db.String(50))
    sender_name = db.Column(db.String(100))
    special_instructions = db.Column(db.Text)
    promo_code = db.Column(db.String(50))
    cancellation_reason = db.Column(db.String(500))

    # Fulfilment
    delivery_boy_id = db.Column(db.Integer, db.ForeignKey('delivery_boys.id'))
    assigned_at = db.Column(db.DateTime)
    picked_up_at = db.Column(db.DateTime)
    delivered_at = db.Column(db.DateTime)
    vendor_id = db.Column(db.Integer, db.ForeignKey('vendors.id'))
    vendor_price = db.Column(db.Float)
    vendor_assigned_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = db.relationship('OrderItem', backref='order', lazy='dynamic', cascade='all, delete-orphan')
    status_history = db.relationship('OrderStatusHistory', backref='order', lazy='dynamic',
                                     cascade='all, delete-orphan')
    rating = db.relationship('OrderRating', backref='order', uselist=False, cascade='all, delete-orphan')
    invoice = db.relationship('Invoice', backref='order', uselist=False)

    @staticmethod
    def generate_order_number():
        """Generate a unique order number."""
        number = f'CK{timestamp_ms()}{random_digits(3)}'
        while Order.query.filter_by(order_number=number).first() is not None:
            number = f'CK{timestamp_ms()}{random_digits(3)}'
        return number

    @property
    def customer_email(self):
        if self.customer:
            return self.customer.email
        return (self.delivery_address or {}).get('email')

    @property
    def customer_phone(self):
        phone = (self.delivery_address or {}).get('phone')
        if not phone and self.customer:
            phone = self.customer.phone
        return phone

    @property
    def customer_name(self):
        name = (self.delivery_address or {}).get('name')
        if not name and self.customer:
            name = self.customer.name
        return name or 'Customer'

    def add_status_history(self, status, notes=None):
        """Add a status change to history."""
        history = OrderStatusHistory(
            order=self,
            status=status,
            notes=notes
        )
        db.session.add(history)
        return history

    def can_transition(self, status):
        return status in ORDER_TRANSITIONS.get(self.status, ())

    def can_cancel(self):
        """Check if order can be cancelled by the customer."""
        return self.status in ['pending', 'confirmed']

    def update_status(self, status, notes=None):
        """Move the order to a new status. Returns (ok, message)."""
        if status not in ORDER_STATUSES:
            return False, 'Invalid status'
        if not self.can_transition(status):
            return False, f'Cannot change status from {self.status} to {status}'

        now = datetime.utcnow()
        self.status = status
        if status == 'out_for_delivery' and not self.picked_up_at:
            self.picked_up_at = now
        elif status == 'delivered':
            self.delivered_at = now
            if self.payment_method == 'cod' and self.payment_status == 'pending':
                self.payment_status = 'paid'
                if self.invoice:
                    self.invoice.set_status('paid')
            if self.delivery_boy:
                self.delivery_boy.record_delivery(self)
            if self.vendor:
                self.vendor.record_completed_order(self)

        self.add_status_history(status, notes)
        if self.user_id:
            db.session.add(Notification.create_order_notification(
                self.user_id, self.order_number, status
            ))
        return True, f'Order status updated to {status}'

    def cancel(self, reason=None):
        """Cancel the order and refund any wallet money it used."""
        if not self.can_cancel():
            return False, 'Order cannot be cancelled at this stage'

        ok, message = self.update_status('cancelled', reason or 'Cancelled by customer')
        if not ok:
            return ok, message
        self.cancellation_reason = reason

        if self.customer and self.wallet_amount_used:
            self.customer.credit_wallet(
                self.wallet_amount_used,
                f'Refund for cancelled order {self.order_number}',
                type='refund',
                order_id=self.id
            )
        if self.payment_status == 'paid':
            self.payment_status = 'refunded'
        return True, 'Order cancelled'

    def to_dict(self, include_items=True):
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'user_id': self.user_id,
            'subtotal': money(self.subtotal),
            'delivery_fee': money(self.delivery_fee),
            'discount': money(self.discount),
            'wallet_amount_used': money(self.wallet_amount_used),
            'total': money(self.total),
            'status': self.status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'delivery_address': self.delivery_address,
            'delivery_date': self.delivery_date,
            'delivery_time': self.delivery_time,
            'delivery_occasion': self.delivery_occasion,
            'relation': self.relation,
            'sender_name': self.sender_name,
            'special_instructions': self.special_instructions,
            'promo_code': self.promo_code,
            'cancellation_reason': self.cancellation_reason,
            'delivery_boy_id': self.delivery_boy_id,
            'assigned_at': isoformat(self.assigned_at),
            'picked_up_at': isoformat(self.picked_up_at),
            'delivered_at': isoformat(self.delivered_at),
            'vendor_id': self.vendor_id,
            'vendor_price': self.vendor_price,
            'invoice_number': self.invoice.invoice_number if self.invoice else None,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

    def __repr__(self):
        return f'<Order {self.order_number}>'


class OrderItem(db.Model):
    """Order item model."""
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False)
    cake_id = db.Column(db.Integer, db.ForeignKey('cakes.id'))
    name = db.Column(db.String(150), nullable=False)  # Snapshot of cake name
    weight = db.Column(db.String(20))
    flavor = db.Column(db.String(50))
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    addons = db.Column(db.JSON, default=list)  # [{id, name, price, quantity}]
    custom_message = db.Column(db.String(255))
    photo_customization = db.Column(db.JSON)
    subtotal = db.Column(db.Float, nullable=False)

    cake = db.relationship('Cake')

    def to_dict(self):
        return {
            'id': self.id,
            'cake_id': self.cake_id,
            'name': self.name,
            'weight': self.weight,
            'flavor': self.flavor,
            'quantity': self.quantity,
            'unit_price': money(self.unit_price),
            'addons': self.addons or [],
            'custom_message': self.custom_message,
            'photo_customization': self.photo_customization,
            'subtotal': money(self.subtotal),
        }

    def __repr__(self):
        return f'<OrderItem {self.name} x {self.quantity}>'


class OrderStatusHistory(db.Model):
    """Order status history model."""
    __tablename__ = 'order_status_history'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False)
    status = db.Column(db.String(30), nullable=False)
    notes = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'status': self.status,
            'notes': self.notes,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<OrderStatusHistory {self.status}>'
