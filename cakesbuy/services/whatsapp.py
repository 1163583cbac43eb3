"""WhatsApp messages through the WhatsApp Cloud API.

Without WHATSAPP_TOKEN and WHATSAPP_PHONE_ID the messages are only logged.
"""

import logging
import requests
from flask import current_app

logger = logging.getLogger(__name__)


def format_phone(phone):
    """Normalise an Indian mobile number to 91XXXXXXXXXX."""
    digits = ''.join(ch for ch in str(phone or '') if ch.isdigit())
    if len(digits) == 10:
        return f'91{digits}'
    return digits


def is_configured():
    return bool(current_app.config.get('WHATSAPP_TOKEN') and current_app.config.get('WHATSAPP_PHONE_ID'))


def send_message(phone, text):
    """Send a text message. Returns True when the API accepted it."""
    to = format_phone(phone)
    if not to:
        return False

    if not is_configured():
        logger.info('WhatsApp (demo) to %s: %s', to, text)
        return True

    url = f"{current_app.config['WHATSAPP_API_URL']}/{current_app.config['WHATSAPP_PHONE_ID']}/messages"
    try:
        response = requests.post(
            url,
            headers={'Authorization': f"Bearer {current_app.config['WHATSAPP_TOKEN']}"},
            json={
                'messaging_product': 'whatsapp',
                'to': to,
                'type': 'text',
                'text': {'body': text},
            },
            timeout=10
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error('WhatsApp message to %s failed: %s', to, e)
        return False
    return True


def send_welcome_message(user, bonus=0):
    text = f"Welcome to CakesBuy, {user.name or 'friend'}!"
    if bonus:
        text += f" We've added ₹{bonus} to your wallet."
    return send_message(user.phone, text)


def send_order_confirmation(order):
    return send_message(
        order.customer_phone,
        f'Hi {order.customer_name}, your order #{order.order_number} for ₹{order.total:.2f} '
        f'is confirmed. Delivery on {order.delivery_date or "the selected date"} '
        f'{order.delivery_time or ""}.'.strip()
    )


def send_delivery_message(order):
    return send_message(
        order.customer_phone,
        f'Your order #{order.order_number} has been delivered. Enjoy your cake!'
    )
