import pytest
from flask import g

from cakesbuy import create_app
from cakesbuy.extensions import db
from cakesbuy.models import (User, Category, Cake, Addon, DeliveryArea, PromoCode, DeliveryBoy, Vendor)
from cakesbuy.utils.tokens import create_token


@pytest.fixture
def app():
    app = create_app('testing')

    # The app context below outlives each request, so drop the cached login
    @app.before_request
    def reset_login():
        g.pop('_login_user', None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers(principal):
    return {'Authorization': f'Bearer {create_token(principal)}'}


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(role='customer', password='secret123', **kwargs):
        counter['n'] += 1
        n = counter['n']
        user = User(
            name=kwargs.pop('name', f'User {n}'),
            email=kwargs.pop('email', f'user{n}@example.com'),
            phone=kwargs.pop('phone', f'98765{n:05d}'),
            role=role,
            **kwargs
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user(name='Asha')


@pytest.fixture
def admin(make_user):
    return make_user(role='admin', name='Admin')


@pytest.fixture
def catalogue(app):
    """A category, two cakes, an addon and a delivery area for 560001."""
    category = Category(name='Birthday Cakes', slug='birthday-cakes')
    db.session.add(category)
    db.session.flush()

    truffle = Cake(
        name='Chocolate Truffle',
        slug='chocolate-truffle',
        category_id=category.id,
        base_price=500.0,
        weights=[{'weight': '0.5kg', 'price': 500}, {'weight': '1kg', 'price': 900}],
        flavors=['Chocolate'],
        tags=['chocolate', 'bestseller'],
        is_bestseller=True
    )
    pineapple = Cake(
        name='Pineapple Delight',
        slug='pineapple-delight',
        category_id=category.id,
        base_price=400.0,
        is_eggless=True
    )
    candles = Addon(name='Candles', price=50.0, category='candles')
    area = DeliveryArea(name='MG Road', pincode='560001', delivery_fee=49.0, free_delivery_threshold=1000.0)
    db.session.add_all([truffle, pineapple, candles, area])
    db.session.commit()
    return {'category': category, 'truffle': truffle, 'pineapple': pineapple,
            'candles': candles, 'area': area}


@pytest.fixture
def promo(app):
    code = PromoCode(code='SWEET10', discount_type='percentage', discount_value=10,
                     min_order_value=300, max_discount=150)
    db.session.add(code)
    db.session.commit()
    return code


@pytest.fixture
def delivery_boy(app):
    boy = DeliveryBoy(name='Ravi', phone='9123456780', vehicle_type='bike')
    boy.set_password('rider123')
    db.session.add(boy)
    db.session.commit()
    return boy


@pytest.fixture
def vendor(app):
    shop = Vendor(name='Meera', email='meera@bakes.in', phone='9988776655',
                  business_name='Meera Bakes', business_address='12 Church Street, Bengaluru',
                  is_active=True, is_verified=True)
    shop.set_password('vendor123')
    db.session.add(shop)
    db.session.commit()
    return shop


def order_payload(cake, **overrides):
    payload = {
        'items': [{'cake_id': cake.id, 'weight': '1kg', 'quantity': 1}],
        'delivery_address': {
            'name': 'Asha',
            'phone': '9876500001',
            'email': 'asha@example.com',
            'address': '1 MG Road',
            'city': 'Bengaluru',
            'pincode': '560001'
        },
        'delivery_date': '2026-12-24',
        'delivery_time': '6 PM - 9 PM',
        'payment_method': 'cod'
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def place_order(client, catalogue):
    """Place an order through the API and return its JSON."""
    def _place_order(user=None, **overrides):
        headers = auth_headers(user) if user else {}
        response = client.post('/api/orders', json=order_payload(catalogue['truffle'], **overrides),
                               headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _place_order
