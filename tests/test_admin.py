from datetime import datetime, timedelta

import pytest

from cakesbuy.extensions import db, mail
from cakesbuy.models import AdminConfig, EventReminder, Notification, Order, User

from conftest import auth_headers


def test_admin_routes_reject_customers(client, customer):
    response = client.get('/api/admin/dashboard', headers=auth_headers(customer))
    assert response.status_code == 403


def test_dashboard(client, place_order, admin, customer, vendor):
    place_order(user=customer)
    data = client.get('/api/admin/dashboard', headers=auth_headers(admin)).get_json()
    assert data['total_users'] == 1
    assert data['total_orders'] == 1
    assert data['today_orders'] == 1
    assert data['pending_orders'] == 1
    assert data['total_revenue'] == 0.0
    assert data['active_vendors'] == 1
    assert len(data['recent_orders']) == 1


def test_orders_filter_and_detail(client, place_order, admin):
    order = place_order()
    place_order()
    headers = auth_headers(admin)
    client.patch(f"/api/admin/orders/{order['id']}/status", json={'status': 'confirmed'}, headers=headers)

    confirmed = client.get('/api/admin/orders?status=confirmed', headers=headers).get_json()
    assert [o['id'] for o in confirmed['orders']] == [order['id']]

    by_number = client.get(f"/api/admin/orders?search={order['order_number']}", headers=headers).get_json()
    assert by_number['total'] == 1

    detail = client.get(f"/api/admin/orders/{order['id']}", headers=headers).get_json()
    assert [h['status'] for h in detail['status_history']] == ['pending', 'confirmed']


def test_user_management(client, admin):
    headers = auth_headers(admin)
    created = client.post('/api/admin/users', json={
        'name': 'Dev', 'email': 'Dev@Example.com', 'phone': '9000033333', 'password': 'secret123'
    }, headers=headers)
    assert created.status_code == 201
    user = created.get_json()
    assert user['email'] == 'dev@example.com'
    assert user['role'] == 'customer'

    no_password = client.post('/api/admin/users', json={
        'email': 'x@example.com', 'phone': '9000044444'
    }, headers=headers)
    assert no_password.status_code == 400

    updated = client.put(f"/api/admin/users/{user['id']}", json={'is_active': False, 'birthday': '01-05'},
                         headers=headers)
    assert updated.get_json()['is_active'] is False
    assert updated.get_json()['birthday'] == '01-05'
    assert updated.get_json()['phone'] == '9000033333'

    assert client.delete(f"/api/admin/users/{admin.id}", headers=headers).status_code == 400
    assert client.delete(f"/api/admin/users/{user['id']}", headers=headers).status_code == 200
    assert db.session.get(User, user['id']) is None


def test_deleting_user_keeps_orders(client, place_order, customer, admin):
    order = place_order(user=customer)
    client.delete(f'/api/admin/users/{customer.id}', headers=auth_headers(admin))
    kept = db.session.get(Order, order['id'])
    assert kept is not None
    assert kept.user_id is None


@pytest.mark.parametrize('type, value, typed', [
    ('number', '75', 75),
    ('boolean', 'yes', True),
    ('json', {'slots': ['10 AM - 1 PM']}, {'slots': ['10 AM - 1 PM']}),
    ('string', 'Happy baking', 'Happy baking'),
])
def test_config_values_are_typed(client, admin, type, value, typed):
    response = client.post('/api/admin/config', json={'key': 'setting', 'type': type, 'value': value},
                           headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.get_json()['typed_value'] == typed
    assert AdminConfig.get_value('setting') == typed


def test_config_crud(client, admin):
    headers = auth_headers(admin)
    bad = client.post('/api/admin/config', json={'key': 'welcome_bonus', 'type': 'number', 'value': 'lots'},
                      headers=headers)
    assert bad.status_code == 400

    client.post('/api/admin/config', json={'key': 'welcome_bonus', 'type': 'number', 'value': 50},
                headers=headers)
    duplicate = client.post('/api/admin/config', json={'key': 'welcome_bonus', 'type': 'number', 'value': 60},
                            headers=headers)
    assert duplicate.status_code == 400

    updated = client.put('/api/admin/config/welcome_bonus', json={'value': 100}, headers=headers)
    assert updated.get_json()['typed_value'] == 100

    assert client.get('/api/admin/config/welcome_bonus', headers=headers).status_code == 200
    assert client.delete('/api/admin/config/welcome_bonus', headers=headers).status_code == 200
    assert client.get('/api/admin/config/welcome_bonus', headers=headers).status_code == 404


def test_upcoming_events_and_bulk_reminders(client, make_user, admin):
    today = datetime.utcnow()
    soon = make_user(name='Priya', birthday=today.strftime('%m-%d'))
    make_user(name='Later', birthday=(today + timedelta(days=60)).strftime('%m-%d'))
    headers = auth_headers(admin)

    events = client.get('/api/admin/users/upcoming-events?days=7', headers=headers).get_json()
    assert [(e['name'], e['days_until']) for e in events] == [('Priya', 0)]

    created = client.post('/api/admin/reminders/create-bulk', json={'days': 7}, headers=headers).get_json()
    assert created['created'] == 1
    again = client.post('/api/admin/reminders/create-bulk', json={'days': 7}, headers=headers).get_json()
    assert again == {'message': '0 reminders created', 'created': 0, 'skipped': 1}

    reminder = EventReminder.query.filter_by(user_id=soon.id).one()
    assert reminder.title == "Priya's Birthday"


def test_bulk_reminders_skip_only_pending_ones(client, make_user, admin):
    today = datetime.utcnow()
    birthday = today.strftime('%m-%d')
    ravi = make_user(name='Ravi', birthday=birthday,
                     anniversary=(today + timedelta(days=3)).strftime('%m-%d'))
    db.session.add(EventReminder(user_id=ravi.id, event_type='birthday', event_date=birthday,
                                 title='Last year', reminder_date=today, is_processed=True))
    db.session.commit()
    headers = auth_headers(admin)

    first = client.post('/api/admin/reminders/create-bulk', json={'days': 7}, headers=headers).get_json()
    assert (first['created'], first['skipped']) == (2, 0)

    second = client.post('/api/admin/reminders/create-bulk', json={'days': 7}, headers=headers).get_json()
    assert (second['created'], second['skipped']) == (0, 2)
    assert EventReminder.query.filter_by(user_id=ravi.id).count() == 3


def test_send_reminders(client, customer, admin):
    reminder = EventReminder(user_id=customer.id, event_type='birthday', event_date='12-01',
                             title="Asha's Birthday", reminder_date=datetime.utcnow() - timedelta(hours=1))
    db.session.add(reminder)
    db.session.commit()
    headers = auth_headers(admin)

    pending = client.get('/api/admin/reminders/pending', headers=headers).get_json()
    assert pending[0]['user']['name'] == 'Asha'

    with mail.record_messages() as outbox:
        response = client.post('/api/admin/reminders/send', json={
            'reminder_ids': [reminder.id, 999], 'discount_code': 'BDAY15', 'discount_percentage': 15
        }, headers=headers)
    data = response.get_json()
    assert data['total_sent'] == 1
    assert data['total_failed'] == 1
    assert outbox[0].recipients == [customer.email]
    assert 'BDAY15' in outbox[0].body

    assert db.session.get(EventReminder, reminder.id).is_processed is True
    assert Notification.query.filter_by(user_id=customer.id, type='reminder').count() == 1
    assert client.get('/api/admin/reminders/pending', headers=headers).get_json() == []


def test_send_reminders_requires_selection(client, admin):
    response = client.post('/api/admin/reminders/send', json={'reminder_ids': []}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_pages(client, admin):
    headers = auth_headers(admin)
    created = client.post('/api/admin/pages', json={
        'title': 'About Us', 'content': 'Baking since 1998.', 'show_in_menu': True
    }, headers=headers)
    assert created.status_code == 201
    page = created.get_json()
    assert page['slug'] == 'about-us'

    draft = client.post('/api/admin/pages', json={
        'title': 'About Us', 'content': 'Draft', 'is_published': False
    }, headers=headers).get_json()
    assert draft['slug'] == 'about-us-1'

    public = client.get('/api/pages').get_json()
    assert [p['slug'] for p in public] == ['about-us']
    assert client.get('/api/pages/about-us-1').status_code == 404

    updated = client.put(f"/api/admin/pages/{page['id']}", json={'content': 'Baking since 1999.'},
                         headers=headers)
    assert updated.get_json()['content'] == 'Baking since 1999.'
    assert updated.get_json()['show_in_menu'] is True

    assert client.delete(f"/api/admin/pages/{draft['id']}", headers=headers).status_code == 200


def test_navigation_items(client, admin, catalogue):
    headers = auth_headers(admin)
    first = client.post('/api/admin/navigation-items', json={'name': 'Birthday',
                                                             'category_id': catalogue['category'].id},
                        headers=headers).get_json()
    assert first['slug'] == 'birthday'
    assert first['url'] == '/category/birthday-cakes'
    assert first['position'] == 0

    second = client.post('/api/admin/navigation-items', json={'name': 'Offers', 'is_new': True},
                         headers=headers).get_json()
    assert second['url'] == '/offers'
    assert second['position'] == 1

    reordered = client.post('/api/admin/navigation-items/reorder', json={'items': [
        {'id': first['id'], 'position': 1}, {'id': second['id'], 'position': 0}
    ]}, headers=headers).get_json()
    assert [item['name'] for item in reordered] == ['Offers', 'Birthday']

    client.put(f"/api/admin/navigation-items/{second['id']}", json={'is_active': False}, headers=headers)
    public = client.get('/api/navigation-items').get_json()
    assert [item['name'] for item in public] == ['Birthday']

    missing = client.post('/api/admin/navigation-items/reorder', json={'items': [{'id': 999}]},
                          headers=headers)
    assert missing.status_code == 404

    not_an_object = client.post('/api/admin/navigation-items/reorder', json={'items': [first['id']]},
                                headers=headers)
    assert not_an_object.status_code == 400
    bad_position = client.post('/api/admin/navigation-items/reorder',
                               json={'items': [{'id': first['id'], 'position': 'top'}]}, headers=headers)
    assert bad_position.status_code == 400


def test_invoice_status(client, place_order, admin):
    place_order()
    headers = auth_headers(admin)
    invoices = client.get('/api/admin/invoices', headers=headers).get_json()
    invoice_id = invoices['invoices'][0]['id']

    bad = client.patch(f'/api/admin/invoices/{invoice_id}/status', json={'status': 'lost'}, headers=headers)
    assert bad.status_code == 400

    paid = client.patch(f'/api/admin/invoices/{invoice_id}/status', json={'status': 'paid'}, headers=headers)
    assert paid.get_json()['status'] == 'paid'
