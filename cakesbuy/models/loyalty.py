"""Loyalty points ledger and rewards catalogue."""

from datetime import datetime, timedelta
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money, random_code


class LoyaltyTransaction(db.Model):
    __tablename__ = 'loyalty_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)  # earned, redeemed, bonus, expired
    points = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'points': self.points,
            'description': self.description,
            'order_id': self.order_id,
            'created_at': isoformat(self.created_at),
        }


class LoyaltyReward(db.Model):
    """Reward that customers can buy with points."""
    __tablename__ = 'loyalty_rewards'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    points_cost = db.Column(db.Integer, nullable=False)
    reward_type = db.Column(db.String(30), nullable=False)  # discount, free_item, free_delivery
    reward_value = db.Column(db.Float, default=0.0)
    min_tier = db.Column(db.String(20), default='Bronze')
    max_redemptions = db.Column(db.Integer)  # Null for unlimited
    current_redemptions = db.Column(db.Integer, default=0)
    validity_days = db.Column(db.Integer, default=30)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    issued = db.relationship('UserReward', backref='reward', lazy='dynamic')

    def has_stock(self):
        return self.max_redemptions is None or self.current_redemptions < self.max_redemptions

    def redeem_for(self, user):
        """Spend the user's points on this reward and issue a reward code."""
        from .user import TIER_ORDER

        if not self.is_active:
            raise ValueError('Reward is not available')
        if TIER_ORDER.index(self.min_tier or 'Bronze') > user.tier_rank():
            raise ValueError(f'This reward requires {self.min_tier} tier')
        if not self.has_stock():
            raise ValueError('Reward is no longer available')
        if (user.loyalty_points or 0) < self.points_cost:
            raise ValueError('Insufficient loyalty points')

        user.add_loyalty_points(-self.points_cost, f'Redeemed: {self.name}', type='redeemed')
        self.current_redemptions = (self.current_redemptions or 0) + 1

        code = UserReward.generate_code()
        user_reward = UserReward(
            user=user,
            reward=self,
            code=code,
            expires_at=datetime.utcnow() + timedelta(days=self.validity_days or 30)
        )
        db.session.add(user_reward)
        return user_reward

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'points_cost': self.points_cost,
            'reward_type': self.reward_type,
            'reward_value': money(self.reward_value),
            'min_tier': self.min_tier,
            'max_redemptions': self.max_redemptions,
            'current_redemptions': self.current_redemptions,
            'validity_days': self.validity_days,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<LoyaltyReward {self.name}>'


class UserReward(db.Model):
    """Reward code issued to a customer."""
    __tablename__ = 'user_rewards'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    reward_id = db.Column(db.Integer, db.ForeignKey('loyalty_rewards.id'), nullable=False)
    code = db.Column(db.String(30), unique=True, nullable=False, index=True)
    is_used = db.Column(db.Boolean, default=False)
    used_at = db.Column(db.DateTime)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'))
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @staticmethod
    def generate_code():
        code = f'RWD-{random_code(8)}'
        while UserReward.query.filter_by(code=code).first() is not None:
            code = f'RWD-{random_code(8)}'
        return code

    def is_expired(self):
        return datetime.utcnow() > self.expires_at

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'is_used': self.is_used,
            'used_at': isoformat(self.used_at),
            'expires_at': isoformat(self.expires_at),
            'reward': self.reward.to_dict() if self.reward else None,
        }
