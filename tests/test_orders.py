import pytest

from cakesbuy.extensions import db, mail
from cakesbuy.models import Order, Invoice, Notification, PromoCode, WalletTransaction

from conftest import auth_headers, order_payload


def set_status(client, admin, order_id, status):
    return client.patch(f'/api/admin/orders/{order_id}/status', json={'status': status},
                        headers=auth_headers(admin))


def test_guest_checkout_prices_from_catalogue(place_order, catalogue):
    candles = catalogue['candles']
    order = place_order(items=[{
        'cake_id': catalogue['truffle'].id,
        'weight': '1kg',
        'quantity': 1,
        'unit_price': 1,
        'addons': [{'id': candles.id, 'quantity': 1}],
    }])
    assert order['user_id'] is None
    assert order['subtotal'] == 950.0
    assert order['delivery_fee'] == 49.0
    assert order['total'] == 999.0
    assert order['status'] == 'pending'
    assert order['payment_status'] == 'pending'
    assert order['order_number'].startswith('CK')
    assert order['items'][0]['unit_price'] == 900.0
    assert order['items'][0]['addons'][0]['name'] == 'Candles'


def test_free_delivery_at_threshold(place_order, catalogue):
    order = place_order(items=[{'cake_id': catalogue['pineapple'].id, 'quantity': 3}])
    assert order['subtotal'] == 1200.0
    assert order['delivery_fee'] == 0.0
    assert order['total'] == 1200.0


def test_promo_code_applied_and_counted(place_order, promo):
    order = place_order(promo_code='sweet10')
    assert order['discount'] == 90.0
    assert order['total'] == 859.0
    assert order['promo_code'] == 'SWEET10'
    assert db.session.get(PromoCode, promo.id).used_count == 1


def test_invalid_promo_rejects_order(client, catalogue, promo):
    response = client.post('/api/orders', json=order_payload(catalogue['truffle'], promo_code='BOGUS'))
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Invalid promo code'
    assert Order.query.count() == 0


@pytest.mark.parametrize('overrides, message', [
    ({'items': []}, 'Order must contain at least one item'),
    ({'payment_method': 'barter'}, 'Invalid payment method'),
    ({'wallet_amount': 100}, 'Login required to pay with wallet'),
])
def test_rejected_checkouts(client, catalogue, overrides, message):
    response = client.post('/api/orders', json=order_payload(catalogue['truffle'], **overrides))
    assert response.status_code == 400
    assert response.get_json()['message'] == message


def test_malformed_items_are_rejected(client, catalogue):
    cake = catalogue['truffle']
    bad_addon = order_payload(cake, items=[{'cake_id': cake.id, 'weight': '1kg', 'addons': [5]}])
    response = client.post('/api/orders', json=bad_addon)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Invalid addon'

    not_an_object = client.post('/api/orders', json=[order_payload(cake)])
    assert not_an_object.status_code == 400
    assert Order.query.count() == 0


def test_undeliverable_pincode(client, catalogue):
    payload = order_payload(catalogue['truffle'])
    payload['delivery_address']['pincode'] = '110001'
    response = client.post('/api/orders', json=payload)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Delivery is not available for this pincode'


def test_customer_order_earns_loyalty_and_invoice(place_order, customer):
    order = place_order(user=customer)
    assert order['user_id'] == customer.id
    assert order['invoice_number'].startswith('INV-')

    assert customer.loyalty_points == 94
    assert customer.order_count == 1
    assert customer.total_spent == 949.0

    invoice = Invoice.query.filter_by(order_id=order['id']).one()
    assert invoice.total_amount == 949.0
    assert [line['description'] for line in invoice.items] == ['Chocolate Truffle (1kg)', 'Delivery charges']
    assert invoice.status == 'sent'


def test_order_placed_sends_confirmation(client, catalogue, customer):
    with mail.record_messages() as outbox:
        response = client.post('/api/orders', json=order_payload(catalogue['truffle']),
                               headers=auth_headers(customer))
    assert response.status_code == 201
    assert any(m.subject.startswith('Order Confirmed') for m in outbox)


def test_full_wallet_payment(place_order, customer):
    customer.credit_wallet(1000, 'Top up')
    db.session.commit()

    order = place_order(user=customer, payment_method='wallet')
    assert order['wallet_amount_used'] == 949.0
    assert order['payment_status'] == 'paid'
    assert order['payment_method'] == 'wallet'
    assert customer.wallet_balance == 51.0

    invoice = Invoice.query.filter_by(order_id=order['id']).one()
    assert invoice.status == 'paid'
    assert invoice.notes == 'Paid ₹949.00 from wallet'
    assert invoice.discount_amount == 0.0


def test_partial_wallet_payment(place_order, customer):
    customer.credit_wallet(200, 'Top up')
    db.session.commit()

    order = place_order(user=customer, payment_method='partial_wallet', wallet_amount=200)
    assert order['wallet_amount_used'] == 200.0
    assert order['payment_method'] == 'partial_wallet'
    assert order['payment_status'] == 'pending'
    assert customer.wallet_balance == 0.0
    assert Invoice.query.filter_by(order_id=order['id']).one().status == 'sent'


def test_full_wallet_payment_needs_enough_balance(client, catalogue, customer):
    customer.credit_wallet(200, 'Top up')
    db.session.commit()

    response = client.post('/api/orders', json=order_payload(catalogue['truffle'], payment_method='wallet'),
                           headers=auth_headers(customer))
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Insufficient wallet balance'
    assert customer.wallet_balance == 200.0


def test_wallet_overdraw_is_rejected(client, catalogue, customer):
    response = client.post('/api/orders', json=order_payload(catalogue['truffle'], wallet_amount=500),
                           headers=auth_headers(customer))
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Insufficient wallet balance'
    assert Order.query.count() == 0


def test_status_transitions(client, place_order, admin):
    order = place_order()

    skipped = set_status(client, admin, order['id'], 'preparing')
    assert skipped.status_code == 400
    assert skipped.get_json()['message'] == 'Cannot change status from pending to preparing'

    unknown = set_status(client, admin, order['id'], 'baking')
    assert unknown.get_json()['message'] == 'Invalid status'

    for status in ('confirmed', 'preparing', 'out_for_delivery', 'delivered'):
        response = set_status(client, admin, order['id'], status)
        assert response.status_code == 200, response.get_json()

    delivered = db.session.get(Order, order['id'])
    assert delivered.picked_up_at is not None
    assert delivered.delivered_at is not None
    # Cash on delivery is collected at the door
    assert delivered.payment_status == 'paid'
    assert delivered.invoice.status == 'paid'

    after = set_status(client, admin, order['id'], 'cancelled')
    assert after.status_code == 400


def test_status_update_requires_status(client, place_order, admin):
    order = place_order()
    response = client.patch(f"/api/admin/orders/{order['id']}/status", json={},
                            headers=auth_headers(admin))
    assert response.status_code == 400


def test_tracking_timeline(client, place_order, admin):
    order = place_order()
    set_status(client, admin, order['id'], 'confirmed')

    data = client.get(f"/api/orders/{order['order_number']}/tracking").get_json()
    assert data['status'] == 'confirmed'
    assert [h['status'] for h in data['status_history']] == ['pending', 'confirmed']


def test_customer_notified_of_status(client, place_order, customer, admin):
    order = place_order(user=customer)
    set_status(client, admin, order['id'], 'confirmed')
    types = [n.type for n in Notification.query.filter_by(user_id=customer.id)]
    assert types == ['order', 'order']


def test_cancel_refunds_wallet(client, place_order, customer):
    customer.credit_wallet(1000, 'Top up')
    db.session.commit()
    order = place_order(user=customer, payment_method='wallet')

    response = client.post(f"/api/orders/{order['order_number']}/cancel", json={'reason': 'Changed plans'},
                           headers=auth_headers(customer))
    assert response.status_code == 200
    data = response.get_json()['order']
    assert data['status'] == 'cancelled'
    assert data['payment_status'] == 'refunded'
    assert data['cancellation_reason'] == 'Changed plans'

    assert customer.wallet_balance == 1000.0
    refund = WalletTransaction.query.filter_by(type='refund').one()
    assert refund.amount == 949.0


def test_cannot_cancel_once_preparing(client, place_order, customer, admin):
    order = place_order(user=customer)
    set_status(client, admin, order['id'], 'confirmed')
    set_status(client, admin, order['id'], 'preparing')

    response = client.post(f"/api/orders/{order['order_number']}/cancel", headers=auth_headers(customer))
    assert response.status_code == 400


def test_cannot_cancel_someone_elses_order(client, place_order, customer, make_user):
    order = place_order(user=customer)
    other = make_user()
    response = client.post(f"/api/orders/{order['order_number']}/cancel", headers=auth_headers(other))
    assert response.status_code == 404


def test_my_orders(client, place_order, customer):
    place_order(user=customer)
    place_order()
    orders = client.get('/api/auth/orders', headers=auth_headers(customer)).get_json()
    assert len(orders) == 1


def test_invoice_access(client, place_order, customer, make_user, admin):
    order = place_order(user=customer)

    own = client.get(f"/api/orders/{order['id']}/invoice", headers=auth_headers(customer))
    assert own.status_code == 200
    assert own.get_json()['invoice_number'] == order['invoice_number']

    other = client.get(f"/api/orders/{order['id']}/invoice", headers=auth_headers(make_user()))
    assert other.status_code == 403

    as_admin = client.post(f"/api/orders/{order['id']}/invoice", headers=auth_headers(admin))
    assert as_admin.status_code == 201
    assert Invoice.query.count() == 1

    public = client.get(f"/api/invoices/{order['invoice_number']}")
    assert public.status_code == 200


def test_rating_only_after_delivery(client, place_order, admin):
    order = place_order()
    early = client.post(f"/api/orders/{order['id']}/rating", json={'overall_rating': 5})
    assert early.status_code == 400

    for status in ('confirmed', 'preparing', 'out_for_delivery', 'delivered'):
        set_status(client, admin, order['id'], status)

    created = client.post(f"/api/orders/{order['id']}/rating",
                          json={'overall_rating': 5, 'taste_rating': 4, 'comment': 'Yum'})
    assert created.status_code == 201

    updated = client.post(f"/api/orders/{order['id']}/rating", json={'overall_rating': 3})
    assert updated.status_code == 200
    rating = updated.get_json()['rating']
    assert rating['overall_rating'] == 3
    assert rating['taste_rating'] == 4

    summary = client.get(f"/api/orders/{order['id']}/rating").get_json()
    assert summary['rating']['overall_rating'] == 3


def test_delivered_order_sends_rating_request(client, place_order, admin):
    order = place_order()
    for status in ('confirmed', 'preparing', 'out_for_delivery'):
        set_status(client, admin, order['id'], status)

    with mail.record_messages() as outbox:
        set_status(client, admin, order['id'], 'delivered')
    assert any('rate' in m.subject.lower() for m in outbox)
