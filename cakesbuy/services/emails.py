"""Transactional email through Flask-Mail."""

import logging
import smtplib
from flask import current_app, render_template
from flask_mail import Message
from cakesbuy.extensions import mail

logger = logging.getLogger(__name__)


def send_email(subject, recipients, template, **context):
    """Render a plain-text template and send it. Returns True when handed to the mail server."""
    recipients = [r for r in (recipients or []) if r]
    if not recipients:
        return False
    msg = Message(subject=subject, recipients=recipients)
    msg.body = render_template(template, **context)
    try:
        mail.send(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error('Error sending "%s" to %s: %s', subject, recipients, e)
        return False
    return True


def send_welcome_email(user, bonus=0):
    return send_email(
        'Welcome to CakesBuy!',
        [user.email],
        'email/welcome.txt',
        user=user,
        bonus=bonus
    )


def send_order_confirmation(order):
    return send_email(
        f'Order Confirmed - #{order.order_number}',
        [order.customer_email],
        'email/order_confirmation.txt',
        order=order,
        items=order.items.all()
    )


def send_status_update(order):
    return send_email(
        f'Order #{order.order_number} is {order.status.replace("_", " ")}',
        [order.customer_email],
        'email/status_update.txt',
        order=order
    )


def send_rating_request(order):
    rating_url = f"{current_app.config['FRONTEND_URL']}/rate-order/{order.id}"
    return send_email(
        f'How was your cake? Rate order #{order.order_number}',
        [order.customer_email],
        'email/rating_request.txt',
        order=order,
        rating_url=rating_url
    )


def send_reminder_email(reminder, discount_code=None, discount_percentage=None):
    return send_email(
        f'Upcoming {reminder.event_type}: {reminder.title}',
        [reminder.user.email],
        'email/reminder.txt',
        reminder=reminder,
        user=reminder.user,
        discount_code=discount_code,
        discount_percentage=discount_percentage,
        shop_url=current_app.config['FRONTEND_URL']
    )


def send_assignment_email(delivery_boy, order):
    return send_email(
        f'New delivery assigned - #{order.order_number}',
        [delivery_boy.email],
        'email/delivery_assignment.txt',
        delivery_boy=delivery_boy,
        order=order
    )
