import base64
import hashlib
import json

import pytest
import requests

from cakesbuy.extensions import db
from cakesbuy.models import Order, PhonePeTransaction
from cakesbuy.services import phonepe


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def json(self):
        return self.payload


def test_checksum_format():
    expected = hashlib.sha256(b'abc/pg/v1/paysalt').hexdigest() + '###1'
    assert phonepe.generate_checksum('abc', '/pg/v1/pay', 'salt', '1') == expected

    status = phonepe.status_checksum('MID', 'T1', 'salt', '1')
    assert status == hashlib.sha256(b'/pg/v1/status/MID/T1salt').hexdigest() + '###1'


def test_callback_checksum():
    header = phonepe.generate_checksum('T1', '/pg/v1/status', 'salt', '1')
    assert phonepe.verify_callback_checksum('T1', header, 'salt', '1')
    assert not phonepe.verify_callback_checksum('T2', header, 'salt', '1')


@pytest.mark.parametrize('data, state', [
    ({'code': 'PAYMENT_SUCCESS'}, 'success'),
    ({'data': {'state': 'COMPLETED'}}, 'success'),
    ({'code': 'PAYMENT_ERROR'}, 'failed'),
    ({'data': {'state': 'FAILED'}}, 'failed'),
    ({'code': 'PAYMENT_PENDING', 'data': {'state': 'PENDING'}}, 'pending'),
])
def test_map_state(data, state):
    assert phonepe.map_state(data) == state


def test_pay_payload_amount_in_paise(app):
    with app.test_request_context():
        payload = phonepe.build_pay_payload('T1', 949.5, None, '9876500001', 'http://r', 'http://c')
    assert payload['amount'] == 94950
    assert payload['merchantUserId'] == 'GUESTT1'
    assert payload['paymentInstrument'] == {'type': 'PAY_PAGE'}


def test_initiate_validation(client):
    assert client.post('/api/payments/phonepe/initiate', json={}).status_code == 400
    assert client.post('/api/payments/phonepe/initiate', json={'order_id': 999}).status_code == 404


def test_demo_payment_marks_order_paid(client, place_order):
    order = place_order()
    started = client.post('/api/payments/phonepe/initiate', json={'order_id': order['id']}).get_json()
    assert started['demo'] is True
    assert '/payment/phonepe/demo?merchantTransactionId=' in started['redirect_url']
    txn_id = started['merchant_transaction_id']

    status = client.get(f'/api/payments/phonepe/status/{txn_id}').get_json()
    assert status['transaction']['status'] == 'initiated'

    settled = client.post('/api/payments/phonepe/demo-callback',
                          json={'merchant_transaction_id': txn_id, 'status': 'COMPLETED'}).get_json()
    assert settled['transaction']['status'] == 'success'

    paid = db.session.get(Order, order['id'])
    assert paid.payment_status == 'paid'
    assert paid.payment_method == 'phonepe'
    assert paid.invoice.status == 'paid'

    again = client.post('/api/payments/phonepe/initiate', json={'order_id': order['id']})
    assert again.status_code == 400

    back = client.get(f'/payment/phonepe/callback?merchantTransactionId={txn_id}')
    assert back.status_code == 302
    assert '/payment/success?' in back.headers['Location']


def test_failed_demo_payment(client, place_order):
    order = place_order()
    txn_id = client.post('/api/payments/phonepe/initiate',
                         json={'order_id': order['id']}).get_json()['merchant_transaction_id']
    client.post('/api/payments/phonepe/demo-callback', json={'merchantTransactionId': txn_id, 'status': 'FAILED'})

    assert db.session.get(Order, order['id']).payment_status == 'failed'
    back = client.get(f'/payment/phonepe/callback?merchantTransactionId={txn_id}')
    assert 'error=payment_failed' in back.headers['Location']


def test_unknown_transaction_redirect(client):
    back = client.get('/payment/phonepe/callback')
    assert back.headers['Location'].endswith('/payment/failure?error=invalid_transaction')


def test_demo_callback_disabled_outside_demo(app, client):
    app.config['PHONEPE_DEMO_MODE'] = False
    response = client.post('/api/payments/phonepe/demo-callback', json={'merchant_transaction_id': 'T1'})
    assert response.status_code == 404


def test_live_initiate_and_status(app, client, place_order, monkeypatch):
    app.config['PHONEPE_DEMO_MODE'] = False
    order = place_order()
    sent = {}

    def fake_post(url, json, headers, timeout):
        sent.update(url=url, headers=headers)
        return FakeResponse({'success': True, 'data': {
            'instrumentResponse': {'redirectInfo': {'url': 'https://mercury.phonepe.com/pay/abc'}}
        }})

    monkeypatch.setattr(phonepe.requests, 'post', fake_post)
    started = client.post('/api/payments/phonepe/initiate', json={'order_id': order['id']}).get_json()
    assert started['redirect_url'] == 'https://mercury.phonepe.com/pay/abc'
    assert sent['url'].endswith('/pg/v1/pay')
    assert sent['headers']['X-VERIFY'].endswith('###1')

    def fake_get(url, headers, timeout):
        return FakeResponse({'success': True, 'code': 'PAYMENT_SUCCESS', 'data': {
            'state': 'COMPLETED', 'transactionId': 'PP123', 'paymentInstrument': {'type': 'UPI'}
        }})

    monkeypatch.setattr(phonepe.requests, 'get', fake_get)
    txn_id = started['merchant_transaction_id']
    status = client.get(f'/api/payments/phonepe/status/{txn_id}').get_json()
    assert status['code'] == 'PAYMENT_SUCCESS'
    assert status['transaction']['phonepe_transaction_id'] == 'PP123'
    assert status['transaction']['payment_method'] == 'UPI'
    assert db.session.get(Order, order['id']).payment_status == 'paid'


def test_gateway_outage_returns_502(app, client, place_order, monkeypatch):
    app.config['PHONEPE_DEMO_MODE'] = False
    order = place_order()

    def broken_post(*args, **kwargs):
        raise requests.ConnectionError('connection refused')

    monkeypatch.setattr(phonepe.requests, 'post', broken_post)
    response = client.post('/api/payments/phonepe/initiate', json={'order_id': order['id']})
    assert response.status_code == 502
    assert response.get_json()['message'] == 'Payment gateway unavailable'
    assert PhonePeTransaction.query.one().status == 'failed'


def test_wallet_share_is_not_charged_again(app, client, place_order, customer, monkeypatch):
    app.config['PHONEPE_DEMO_MODE'] = False
    customer.credit_wallet(200, 'Top up')
    db.session.commit()
    order = place_order(user=customer, payment_method='partial_wallet', wallet_amount=200)
    assert order['total'] == 949.0
    sent = {}

    def fake_post(url, json, headers, timeout):
        sent['request'] = json['request']
        return FakeResponse({'success': True, 'data': {
            'instrumentResponse': {'redirectInfo': {'url': 'https://mercury.phonepe.com/pay/xyz'}}
        }})

    monkeypatch.setattr(phonepe.requests, 'post', fake_post)
    started = client.post('/api/payments/phonepe/initiate', json={'order_id': order['id']}).get_json()

    payload = json.loads(base64.b64decode(sent['request']))
    assert payload['amount'] == 74900
    assert payload['merchantUserId'] == f'MUID{customer.id}'
    txn = PhonePeTransaction.query.filter_by(merchant_transaction_id=started['merchant_transaction_id']).one()
    assert txn.amount == 749.0

    def fake_get(url, headers, timeout):
        return FakeResponse({'success': True, 'code': 'PAYMENT_SUCCESS', 'data': {'state': 'COMPLETED'}})

    monkeypatch.setattr(phonepe.requests, 'get', fake_get)
    client.get(f"/api/payments/phonepe/status/{started['merchant_transaction_id']}")
    paid = db.session.get(Order, order['id'])
    assert paid.payment_status == 'paid'
    assert paid.payment_method == 'partial_wallet'
