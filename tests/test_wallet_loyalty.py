from datetime import datetime, timedelta

import pytest

from cakesbuy.extensions import db
from cakesbuy.models import LoyaltyReward, UserReward, WalletTransaction
from cakesbuy.models.user import tier_for_points

from conftest import auth_headers


@pytest.mark.parametrize('points, tier', [
    (0, 'Bronze'), (999, 'Bronze'), (1000, 'Silver'), (5000, 'Gold'), (10000, 'Platinum'),
])
def test_tiers(points, tier):
    assert tier_for_points(points) == tier


def test_wallet_transactions_record_balance(customer):
    customer.credit_wallet(300, 'Top up')
    customer.debit_wallet(120, 'Order')
    db.session.commit()
    balances = [t.balance_after for t in customer.wallet_transactions.order_by(WalletTransaction.id)]
    assert balances == [300.0, 180.0]

    with pytest.raises(ValueError, match='Insufficient wallet balance'):
        customer.debit_wallet(500, 'Too much')


def test_wallet_endpoints(client, customer):
    customer.credit_wallet(75, 'Cashback')
    db.session.commit()
    headers = auth_headers(customer)

    assert client.get('/api/wallet/balance', headers=headers).get_json() == {'balance': 75.0}
    transactions = client.get('/api/wallet/transactions', headers=headers).get_json()
    assert [t['description'] for t in transactions] == ['Cashback']


def test_admin_wallet_adjustments(client, customer, admin):
    headers = auth_headers(admin)
    credit = client.post('/api/admin/wallet/credit',
                         json={'user_id': customer.id, 'amount': 250, 'description': 'Goodwill'},
                         headers=headers)
    assert credit.status_code == 200
    assert credit.get_json()['balance'] == 250.0
    assert credit.get_json()['transaction']['type'] == 'admin_credit'

    overdraw = client.post('/api/admin/wallet/debit',
                           json={'user_id': customer.id, 'amount': 300, 'description': 'Correction'},
                           headers=headers)
    assert overdraw.status_code == 400

    debit = client.post('/api/admin/wallet/debit',
                        json={'user_id': customer.id, 'amount': 100, 'description': 'Correction'},
                        headers=headers)
    assert debit.get_json()['balance'] == 150.0

    history = client.get(f'/api/admin/wallet/transactions/{customer.id}', headers=headers).get_json()
    assert [t['type'] for t in history['transactions']] == ['admin_debit', 'admin_credit']


def test_admin_wallet_requires_positive_amount(client, customer, admin):
    response = client.post('/api/admin/wallet/credit',
                           json={'user_id': customer.id, 'amount': -5, 'description': 'Oops'},
                           headers=auth_headers(admin))
    assert response.status_code == 400


def test_loyalty_stats(client, customer):
    customer.add_loyalty_points(1200, 'Bonus', type='bonus')
    db.session.commit()

    stats = client.get('/api/loyalty/stats', headers=auth_headers(customer)).get_json()
    assert stats['points'] == 1200
    assert stats['tier'] == 'Silver'
    assert stats['next_tier'] == 'Gold'
    assert stats['points_to_next_tier'] == 3800


@pytest.fixture
def rewards(app):
    cake = LoyaltyReward(name='Free pastry', points_cost=100, reward_type='free_item', max_redemptions=1)
    gold = LoyaltyReward(name='Gold voucher', points_cost=50, reward_type='discount', reward_value=200,
                         min_tier='Gold')
    db.session.add_all([cake, gold])
    db.session.commit()
    return {'pastry': cake, 'gold': gold}


def test_rewards_visible_for_tier(client, customer, rewards):
    listed = client.get('/api/loyalty/rewards', headers=auth_headers(customer)).get_json()
    assert [r['name'] for r in listed] == ['Free pastry']


def test_redeem_reward(client, customer, rewards):
    headers = auth_headers(customer)
    reward_id = rewards['pastry'].id

    short = client.post('/api/loyalty/redeem', json={'reward_id': reward_id}, headers=headers)
    assert short.status_code == 400
    assert short.get_json()['message'] == 'Insufficient loyalty points'

    customer.add_loyalty_points(150, 'Bonus', type='bonus')
    db.session.commit()

    response = client.post('/api/loyalty/redeem', json={'reward_id': reward_id}, headers=headers)
    assert response.status_code == 201
    data = response.get_json()
    assert data['points'] == 50
    assert data['reward']['code'].startswith('RWD-')

    sold_out = client.post('/api/loyalty/redeem', json={'reward_id': reward_id}, headers=headers)
    assert sold_out.status_code == 400

    gold = client.post('/api/loyalty/redeem', json={'reward_id': rewards['gold'].id}, headers=headers)
    assert gold.get_json()['message'] == 'This reward requires Gold tier'

    mine = client.get('/api/loyalty/my-rewards', headers=headers).get_json()
    assert len(mine) == 1


def test_apply_reward(client, customer, rewards):
    customer.add_loyalty_points(150, 'Bonus', type='bonus')
    db.session.commit()
    headers = auth_headers(customer)
    code = client.post('/api/loyalty/redeem', json={'reward_id': rewards['pastry'].id},
                       headers=headers).get_json()['reward']['code']

    unknown = client.post('/api/loyalty/apply-reward', json={'code': 'RWD-NOPE0000'}, headers=headers)
    assert unknown.status_code == 404

    valid = client.post('/api/loyalty/apply-reward', json={'code': code.lower()}, headers=headers)
    assert valid.status_code == 200
    assert valid.get_json()['valid'] is True

    with_order = client.post('/api/loyalty/apply-reward', json={'code': code, 'order_id': 1}, headers=headers)
    assert with_order.status_code == 200
    assert UserReward.query.filter_by(code=code).one().is_used is False

    reward = UserReward.query.filter_by(code=code).one()
    reward.expires_at = datetime.utcnow() - timedelta(days=1)
    db.session.commit()
    expired = client.post('/api/loyalty/apply-reward', json={'code': code}, headers=headers)
    assert expired.status_code == 400


def test_admin_creates_reward(client, admin):
    response = client.post('/api/admin/loyalty/rewards', json={
        'name': 'Free delivery', 'points_cost': 80, 'reward_type': 'free_delivery'
    }, headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.get_json()['min_tier'] == 'Bronze'
