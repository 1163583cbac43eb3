"""Notification model."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat


class Notification(db.Model):
    """In-app notification for a customer or a delivery boy."""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    delivery_boy_id = db.Column(db.Integer, db.ForeignKey('delivery_boys.id'), index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), default='system')  # order, assignment, promo, reminder, system
    link = db.Column(db.String(255))  # Optional URL to redirect
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @staticmethod
    def create_order_notification(user_id, order_number, status):
        """Create an order status notification."""
        status_messages = {
            'pending': f'Your order #{order_number} has been placed successfully!',
            'confirmed': 'Your order has been confirmed!',
            'preparing': 'Our bakers are preparing your cake.',
            'out_for_delivery': 'Your order is on its way!',
            'delivered': 'Your order has been delivered. Enjoy!',
            'cancelled': 'Your order has been cancelled.',
        }
        message = status_messages.get(status, f'Order status updated to: {status}')
        return Notification(
            user_id=user_id,
            title=f'Order {order_number}',
            message=message,
            type='order',
            link=f'/orders/{order_number}'
        )

    @staticmethod
    def create_assignment_notification(delivery_boy_id, order):
        address = order.delivery_address or {}
        return Notification(
            delivery_boy_id=delivery_boy_id,
            title=f'New delivery: {order.order_number}',
            message=(f"Deliver to {address.get('name', 'customer')}, "
                     f"{address.get('address', '')} {address.get('pincode', '')}").strip(),
            type='assignment',
            link=f'/delivery/orders/{order.id}'
        )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'link': self.link,
            'is_read': self.is_read,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Notification {self.title}>'
