from cakesbuy.extensions import db, mail
from cakesbuy.models import DeliveryBoy, Notification, Order

from conftest import auth_headers


def assign(client, admin, order_id, delivery_boy_id, **extra):
    payload = dict(delivery_boy_id=delivery_boy_id, **extra)
    return client.post(f'/api/admin/orders/{order_id}/assign', json=payload, headers=auth_headers(admin))


def advance(client, admin, order_id, *statuses):
    for status in statuses:
        response = client.patch(f'/api/admin/orders/{order_id}/status', json={'status': status},
                                headers=auth_headers(admin))
        assert response.status_code == 200, response.get_json()


def test_register_and_login(client):
    payload = {
        'name': 'Kiran',
        'phone': '9000011111',
        'password': 'rider123',
        'vehicle_type': 'scooter',
        'vehicle_number': 'KA01AB1234',
    }
    response = client.post('/api/delivery/register', json=payload)
    assert response.status_code == 201

    duplicate = client.post('/api/delivery/register', json=payload)
    assert duplicate.status_code == 400

    login = client.post('/api/delivery/login', json={'phone': '9000011111', 'password': 'rider123'})
    assert login.status_code == 200
    token = login.get_json()['token']

    profile = client.get('/api/delivery/profile', headers={'Authorization': f'Bearer {token}'})
    assert profile.get_json()['vehicle_type'] == 'scooter'


def test_customer_token_cannot_use_delivery_app(client, customer):
    response = client.get('/api/delivery/orders', headers=auth_headers(customer))
    assert response.status_code == 403


def test_assignment_notifies_delivery_boy(client, place_order, admin, delivery_boy):
    delivery_boy.email = 'ravi@example.com'
    db.session.commit()
    order = place_order()

    with mail.record_messages() as outbox:
        response = assign(client, admin, order['id'], delivery_boy.id, delivery_price=60)
    assert response.status_code == 200
    data = response.get_json()['order']
    assert data['delivery_boy_id'] == delivery_boy.id
    assert data['delivery_fee'] == 60.0
    assert data['assigned_at'] is not None
    assert [m.recipients for m in outbox] == [['ravi@example.com']]

    notification = Notification.query.filter_by(delivery_boy_id=delivery_boy.id).one()
    assert notification.type == 'assignment'


def test_cannot_assign_inactive_or_finished(client, place_order, admin, delivery_boy):
    order = place_order()
    delivery_boy.is_active = False
    db.session.commit()
    assert assign(client, admin, order['id'], delivery_boy.id).status_code == 400

    delivery_boy.is_active = True
    db.session.get(Order, order['id']).status = 'cancelled'
    db.session.commit()
    assert assign(client, admin, order['id'], delivery_boy.id).status_code == 400


def test_delivery_flow_credits_earnings(client, place_order, admin, delivery_boy):
    order = place_order()
    assign(client, admin, order['id'], delivery_boy.id)
    advance(client, admin, order['id'], 'confirmed', 'preparing')
    headers = auth_headers(delivery_boy)

    active = client.get('/api/delivery/orders', headers=headers).get_json()
    assert [o['id'] for o in active] == [order['id']]

    not_allowed = client.patch(f"/api/delivery/orders/{order['id']}/status", json={'status': 'confirmed'},
                               headers=headers)
    assert not_allowed.status_code == 400

    picked = client.patch(f"/api/delivery/orders/{order['id']}/status",
                          json={'status': 'out_for_delivery'}, headers=headers)
    assert picked.status_code == 200
    assert picked.get_json()['order']['picked_up_at'] is not None

    done = client.patch(f"/api/delivery/orders/{order['id']}/status", json={'status': 'delivered'},
                        headers=headers)
    assert done.status_code == 200
    assert done.get_json()['order']['payment_status'] == 'paid'

    boy = db.session.get(DeliveryBoy, delivery_boy.id)
    assert boy.total_deliveries == 1
    assert boy.total_earnings == 49.0

    stats = client.get('/api/delivery/stats', headers=headers).get_json()
    assert stats['total_deliveries'] == 1
    assert stats['today_deliveries'] == 1

    history = client.get('/api/delivery/order-history', headers=headers).get_json()
    assert history['total'] == 1


def test_only_assignee_can_update(client, place_order, admin, delivery_boy):
    other = DeliveryBoy(name='Other', phone='9123400000')
    other.set_password('rider123')
    db.session.add(other)
    db.session.commit()

    order = place_order()
    assign(client, admin, order['id'], delivery_boy.id)
    advance(client, admin, order['id'], 'confirmed', 'preparing')

    response = client.patch(f"/api/delivery/orders/{order['id']}/status",
                            json={'status': 'out_for_delivery'}, headers=auth_headers(other))
    assert response.status_code == 403


def test_reject_unassigns_order(client, place_order, admin, delivery_boy):
    order = place_order(special_instructions='Ring twice')
    assign(client, admin, order['id'], delivery_boy.id)

    response = client.post(f"/api/delivery/orders/{order['id']}/reject", json={'reason': 'Bike broke down'},
                           headers=auth_headers(delivery_boy))
    assert response.status_code == 200
    data = response.get_json()['order']
    assert data['delivery_boy_id'] is None
    assert data['special_instructions'] == 'Ring twice [REJECTED by Ravi: Bike broke down]'


def test_notifications_mark_read(client, place_order, admin, delivery_boy):
    order = place_order()
    assign(client, admin, order['id'], delivery_boy.id)
    headers = auth_headers(delivery_boy)

    data = client.get('/api/delivery/notifications', headers=headers).get_json()
    assert data['unread_count'] == 1

    client.post('/api/delivery/notifications/mark-read', json={}, headers=headers)
    data = client.get('/api/delivery/notifications', headers=headers).get_json()
    assert data['unread_count'] == 0


def test_admin_delivery_boy_crud(client, admin):
    headers = auth_headers(admin)
    created = client.post('/api/admin/delivery-boys', json={
        'name': 'Sunil', 'phone': '9000022222', 'password': 'rider123'
    }, headers=headers)
    assert created.status_code == 201
    boy_id = created.get_json()['id']

    updated = client.put(f'/api/admin/delivery-boys/{boy_id}', json={'vehicle_number': 'KA05XY9999'},
                         headers=headers)
    assert updated.status_code == 200
    assert updated.get_json()['vehicle_number'] == 'KA05XY9999'
    assert updated.get_json()['is_active'] is True

    deleted = client.delete(f'/api/admin/delivery-boys/{boy_id}', headers=headers)
    assert deleted.status_code == 200
    assert db.session.get(DeliveryBoy, boy_id) is None
