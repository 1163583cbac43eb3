from cakesbuy.extensions import db
from cakesbuy.models import Address, EventReminder, Notification

from conftest import auth_headers


ADDRESS = {
    'name': 'Asha',
    'full_address': '221 Residency Road, Richmond Town',
    'city': 'Bengaluru',
    'pincode': '560025',
}


def test_profile_update(client, customer, make_user):
    headers = auth_headers(customer)
    response = client.put('/api/auth/profile', json={'birthday': '04-12', 'name': 'Asha R'}, headers=headers)
    assert response.status_code == 200
    user = response.get_json()['user']
    assert user['birthday'] == '04-12'
    assert user['name'] == 'Asha R'
    assert user['email'] == customer.email

    bad_date = client.put('/api/auth/profile', json={'anniversary': '13-40'}, headers=headers)
    assert bad_date.status_code == 400

    other = make_user()
    taken = client.put('/api/auth/profile', json={'email': other.email}, headers=headers)
    assert taken.status_code == 400


def test_first_address_becomes_default(client, customer):
    headers = auth_headers(customer)
    first = client.post('/api/addresses', json=ADDRESS, headers=headers).get_json()
    assert first['is_default'] is True
    assert first['label'] == 'home'

    second = client.post('/api/addresses', json=dict(ADDRESS, label='work', is_default=True),
                         headers=headers).get_json()
    assert second['is_default'] is True
    assert db.session.get(Address, first['id']).is_default is False

    listed = client.get('/api/addresses', headers=headers).get_json()
    assert [a['id'] for a in listed] == [second['id'], first['id']]


def test_deleting_default_promotes_another(client, customer):
    headers = auth_headers(customer)
    first = client.post('/api/addresses', json=ADDRESS, headers=headers).get_json()
    second = client.post('/api/addresses', json=dict(ADDRESS, label='other'), headers=headers).get_json()
    assert second['is_default'] is False

    client.delete(f"/api/addresses/{first['id']}", headers=headers)
    assert db.session.get(Address, second['id']).is_default is True


def test_address_validation_and_ownership(client, customer, make_user):
    headers = auth_headers(customer)
    short = client.post('/api/addresses', json=dict(ADDRESS, full_address='MG Rd', pincode='0123'),
                        headers=headers)
    assert short.status_code == 400
    assert set(short.get_json()['errors']) == {'full_address', 'pincode'}

    address = client.post('/api/addresses', json=ADDRESS, headers=headers).get_json()
    stranger = auth_headers(make_user())
    assert client.put(f"/api/addresses/{address['id']}", json=ADDRESS, headers=stranger).status_code == 404
    assert client.delete(f"/api/addresses/{address['id']}", headers=stranger).status_code == 404

    renamed = client.put(f"/api/addresses/{address['id']}", json={'landmark': 'Near the park'}, headers=headers)
    assert renamed.status_code == 200
    assert renamed.get_json()['landmark'] == 'Near the park'
    assert renamed.get_json()['city'] == 'Bengaluru'


def test_reminders(client, customer):
    headers = auth_headers(customer)
    response = client.post('/api/reminders', json={
        'event_type': 'anniversary',
        'event_date': '11-20',
        'relationship_type': 'parents',
        'title': "Mum and Dad's anniversary",
        'days_before': 3,
    }, headers=headers)
    assert response.status_code == 201
    reminder = response.get_json()
    assert reminder['is_processed'] is False
    assert reminder['event_date'] == '11-20'

    invalid = client.post('/api/reminders', json={
        'event_type': 'birthday', 'event_date': '2/30', 'title': 'Mine'
    }, headers=headers)
    assert invalid.status_code == 400

    listed = client.get('/api/reminders', headers=headers).get_json()
    assert [r['title'] for r in listed] == ["Mum and Dad's anniversary"]

    assert client.delete(f"/api/reminders/{reminder['id']}", headers=headers).status_code == 200
    assert EventReminder.query.count() == 0


def test_notifications(client, customer):
    for n in range(3):
        db.session.add(Notification(user_id=customer.id, title=f'Note {n}', message='Hello', type='promo'))
    db.session.commit()
    headers = auth_headers(customer)

    data = client.get('/api/notifications', headers=headers).get_json()
    assert data['unread_count'] == 3

    first_id = data['notifications'][0]['id']
    client.post('/api/notifications/mark-read', json={'ids': [first_id]}, headers=headers)
    assert client.get('/api/notifications', headers=headers).get_json()['unread_count'] == 2

    client.post('/api/notifications/mark-read', json={}, headers=headers)
    assert client.get('/api/notifications', headers=headers).get_json()['unread_count'] == 0
