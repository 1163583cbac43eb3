"""Fan-out of order events to email, WhatsApp, SNS and in-app notifications."""

import logging
from cakesbuy.extensions import db
from cakesbuy.models import Notification
from . import alerts, emails, whatsapp

logger = logging.getLogger(__name__)


def notify_order_placed(order):
    emails.send_order_confirmation(order)
    whatsapp.send_order_confirmation(order)
    alerts.new_order_alert(order)


def notify_status_change(order):
    """Outbound messages for a status the order has just moved to."""
    if order.status in ('confirmed', 'delivered'):
        emails.send_status_update(order)
    if order.status == 'delivered':
        whatsapp.send_delivery_message(order)
        emails.send_rating_request(order)
    logger.info('Order %s is now %s', order.order_number, order.status)


def notify_assignment(delivery_boy, order):
    db.session.add(Notification.create_assignment_notification(delivery_boy.id, order))
    db.session.commit()
    emails.send_assignment_email(delivery_boy, order)
