"""Wallet and loyalty routes for customers."""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from cakesbuy.extensions import db
from cakesbuy.models import WalletTransaction, LoyaltyTransaction, LoyaltyReward, UserReward
from cakesbuy.models.user import LOYALTY_TIERS, TIER_ORDER
from cakesbuy.utils.decorators import customer_required
from cakesbuy.utils.helpers import money, json_body

wallet_bp = Blueprint('wallet', __name__)


# --- Wallet ---

@wallet_bp.route('/wallet/balance')
@login_required
@customer_required
def wallet_balance():
    return jsonify({'balance': money(current_user.wallet_balance)})


@wallet_bp.route('/wallet/transactions')
@login_required
@customer_required
def wallet_transactions():
    limit = request.args.get('limit', 50, type=int)
    transactions = current_user.wallet_transactions.order_by(
        WalletTransaction.created_at.desc(), WalletTransaction.id.desc()
    ).limit(limit).all()
    return jsonify([t.to_dict() for t in transactions])


# --- Loyalty ---

@wallet_bp.route('/loyalty/stats')
@login_required
@customer_required
def loyalty_stats():
    """Points, tier and progress to the next tier."""
    points = current_user.loyalty_points or 0
    next_tier = None
    points_to_next = None
    for tier, threshold in reversed(LOYALTY_TIERS):
        if threshold > points:
            next_tier = tier
            points_to_next = threshold - points
            break

    return jsonify({
        'points': points,
        'tier': current_user.loyalty_tier,
        'total_spent': money(current_user.total_spent),
        'order_count': current_user.order_count,
        'next_tier': next_tier,
        'points_to_next_tier': points_to_next
    })


@wallet_bp.route('/loyalty/transactions')
@login_required
@customer_required
def loyalty_transactions():
    limit = request.args.get('limit', 50, type=int)
    transactions = current_user.loyalty_transactions.order_by(
        LoyaltyTransaction.created_at.desc(), LoyaltyTransaction.id.desc()
    ).limit(limit).all()
    return jsonify([t.to_dict() for t in transactions])


@wallet_bp.route('/loyalty/rewards')
@login_required
@customer_required
def loyalty_rewards():
    """Active rewards the customer's tier can claim."""
    eligible_tiers = TIER_ORDER[:current_user.tier_rank() + 1]
    rewards = LoyaltyReward.query.filter(
        LoyaltyReward.is_active == True,  # noqa: E712
        LoyaltyReward.min_tier.in_(eligible_tiers)
    ).order_by(LoyaltyReward.points_cost).all()
    return jsonify([r.to_dict() for r in rewards if r.has_stock()])


@wallet_bp.route('/loyalty/redeem', methods=['POST'])
@login_required
@customer_required
def redeem_reward():
    data = json_body()
    reward_id = data.get('reward_id')
    if not reward_id:
        return jsonify({'message': 'Reward is required'}), 400

    reward = LoyaltyReward.query.get(reward_id)
    if not reward:
        return jsonify({'message': 'Reward not found'}), 404

    try:
        user_reward = reward.redeem_for(current_user._get_current_object())
    except ValueError as e:
        return jsonify({'message': str(e)}), 400

    db.session.commit()
    return jsonify({
        'message': f'{reward.name} redeemed successfully',
        'reward': user_reward.to_dict(),
        'points': current_user.loyalty_points
    }), 201


@wallet_bp.route('/loyalty/my-rewards')
@login_required
@customer_required
def my_rewards():
    rewards = current_user.rewards.order_by(UserReward.created_at.desc()).all()
    return jsonify([r.to_dict() for r in rewards])


@wallet_bp.route('/loyalty/apply-reward', methods=['POST'])
@login_required
@customer_required
def apply_reward():
    """Check that a reward code can still be used. The code itself is not consumed."""
    data = json_body()
    code = (data.get('code') or '').strip().upper()
    if not code:
        return jsonify({'message': 'Reward code is required'}), 400

    user_reward = UserReward.query.filter_by(code=code, user_id=current_user.id).first()
    if not user_reward:
        return jsonify({'message': 'Reward code not found'}), 404
    if user_reward.is_used:
        return jsonify({'message': 'Reward code has already been used'}), 400
    if user_reward.is_expired():
        return jsonify({'message': 'Reward code has expired'}), 400

    return jsonify({'valid': True, 'reward': user_reward.to_dict()})
