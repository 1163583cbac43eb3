"""PhonePe payment gateway client.

Requests are base64 encoded JSON signed with an X-VERIFY checksum:
sha256(payload + endpoint + salt_key) followed by ``###`` and the key index.
"""

import base64
import hashlib
import json
import logging
import random
import requests
from flask import current_app
from cakesbuy.utils.helpers import timestamp_ms

logger = logging.getLogger(__name__)

PAY_ENDPOINT = '/pg/v1/pay'


class PaymentGatewayError(Exception):
    """PhonePe could not be reached or answered with an error."""


def generate_checksum(payload, endpoint, salt_key, key_index):
    digest = hashlib.sha256(f'{payload}{endpoint}{salt_key}'.encode('utf-8')).hexdigest()
    return f'{digest}###{key_index}'


def status_checksum(merchant_id, merchant_transaction_id, salt_key, key_index):
    endpoint = f'/pg/v1/status/{merchant_id}/{merchant_transaction_id}'
    return generate_checksum('', endpoint, salt_key, key_index)


def verify_callback_checksum(merchant_transaction_id, x_verify, salt_key, key_index):
    """Check the X-VERIFY header sent with a callback."""
    return generate_checksum(merchant_transaction_id, '/pg/v1/status', salt_key, key_index) == x_verify


def generate_transaction_id():
    return f'T{timestamp_ms()}_{random.randint(100000000, 999999999)}'


def encode_payload(payload):
    return base64.b64encode(json.dumps(payload).encode('utf-8')).decode('utf-8')


def build_pay_payload(merchant_transaction_id, amount, user_id, mobile, redirect_url, callback_url):
    return {
        'merchantId': current_app.config['PHONEPE_MERCHANT_ID'],
        'merchantTransactionId': merchant_transaction_id,
        'merchantUserId': f'MUID{user_id}' if user_id else f'GUEST{merchant_transaction_id}',
        'amount': int(round(amount * 100)),  # paise
        'redirectUrl': redirect_url,
        'redirectMode': 'REDIRECT',
        'callbackUrl': callback_url,
        'mobileNumber': mobile,
        'paymentInstrument': {'type': 'PAY_PAGE'},
    }


def initiate_payment(payload):
    """POST the pay request. Returns the redirect URL from PhonePe."""
    config = current_app.config
    encoded = encode_payload(payload)
    checksum = generate_checksum(encoded, PAY_ENDPOINT, config['PHONEPE_SALT_KEY'],
                                 config['PHONEPE_KEY_INDEX'])
    try:
        response = requests.post(
            f"{config['PHONEPE_BASE_URL']}{PAY_ENDPOINT}",
            json={'request': encoded},
            headers={'Content-Type': 'application/json', 'X-VERIFY': checksum},
            timeout=config['PHONEPE_TIMEOUT']
        )
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error('PhonePe pay request failed: %s', e)
        raise PaymentGatewayError('Payment gateway unavailable') from e

    if not data.get('success'):
        raise PaymentGatewayError(data.get('message') or 'Payment initiation failed')

    redirect = data.get('data', {}).get('instrumentResponse', {}).get('redirectInfo', {})
    return redirect.get('url')


def check_status(merchant_transaction_id):
    """GET the transaction status. Returns the decoded PhonePe response."""
    config = current_app.config
    merchant_id = config['PHONEPE_MERCHANT_ID']
    checksum = status_checksum(merchant_id, merchant_transaction_id, config['PHONEPE_SALT_KEY'],
                               config['PHONEPE_KEY_INDEX'])
    try:
        response = requests.get(
            f"{config['PHONEPE_BASE_URL']}/pg/v1/status/{merchant_id}/{merchant_transaction_id}",
            headers={
                'Content-Type': 'application/json',
                'X-VERIFY': checksum,
                'X-MERCHANT-ID': merchant_id,
            },
            timeout=config['PHONEPE_TIMEOUT']
        )
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error('PhonePe status check for %s failed: %s', merchant_transaction_id, e)
        raise PaymentGatewayError('Payment gateway unavailable') from e


def map_state(data):
    """Translate a PhonePe status response to our transaction status."""
    state = (data.get('data') or {}).get('state')
    if data.get('code') == 'PAYMENT_SUCCESS' or state == 'COMPLETED':
        return 'success'
    if state == 'FAILED' or data.get('code') in ('PAYMENT_ERROR', 'PAYMENT_DECLINED'):
        return 'failed'
    return 'pending'


def apply_status(transaction, data):
    """Copy a status response onto a transaction and its order."""
    transaction.status = map_state(data)
    transaction.response_code = data.get('code')
    transaction.response_message = data.get('message')
    details = data.get('data') or {}
    if details.get('transactionId'):
        transaction.phonepe_transaction_id = details['transactionId']
    instrument = details.get('paymentInstrument')
    if instrument:
        transaction.payment_instrument = instrument
        transaction.payment_method = instrument.get('type')

    order = transaction.order
    if transaction.status == 'success':
        order.payment_status = 'paid'
        if order.payment_method != 'partial_wallet':
            order.payment_method = 'phonepe'
        if order.invoice:
            order.invoice.set_status('paid')
    elif transaction.status == 'failed' and order.payment_status != 'paid':
        order.payment_status = 'failed'
    return transaction.status
