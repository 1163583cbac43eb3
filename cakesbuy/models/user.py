"""User and Address models."""

from datetime import datetime
from flask_login import UserMixin
from cakesbuy.extensions import db, bcrypt
from cakesbuy.utils.helpers import isoformat, money
from .wallet import WalletTransaction
from .loyalty import LoyaltyTransaction


# Minimum points for each tier, highest first
LOYALTY_TIERS = [
    ('Platinum', 10000),
    ('Gold', 5000),
    ('Silver', 1000),
    ('Bronze', 0),
]
TIER_ORDER = ['Bronze', 'Silver', 'Gold', 'Platinum']


def tier_for_points(points):
    """Return the loyalty tier earned by a points balance."""
    for tier, threshold in LOYALTY_TIERS:
        if points >= threshold:
            return tier
    return 'Bronze'


class User(UserMixin, db.Model):
    """Customer or admin account."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(15), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100))
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='customer')  # customer, admin
    is_active = db.Column(db.Boolean, default=True)

    # Special dates stored as MM-DD
    birthday = db.Column(db.String(5))
    anniversary = db.Column(db.String(5))

    # Loyalty and wallet
    loyalty_points = db.Column(db.Integer, default=0)
    loyalty_tier = db.Column(db.String(20), default='Bronze')
    total_spent = db.Column(db.Float, default=0.0)
    order_count = db.Column(db.Integer, default=0)
    wallet_balance = db.Column(db.Float, default=0.0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    addresses = db.relationship('Address', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    orders = db.relationship('Order', backref='customer', lazy='dynamic')
    reviews = db.relationship('Review', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    reminders = db.relationship('EventReminder', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    notifications = db.relationship('Notification', backref='user', lazy='dynamic', cascade='all, delete-orphan')
    wallet_transactions = db.relationship('WalletTransaction', backref='user', lazy='dynamic',
                                          cascade='all, delete-orphan',
                                          foreign_keys='WalletTransaction.user_id')
    loyalty_transactions = db.relationship('LoyaltyTransaction', backref='user', lazy='dynamic',
                                           cascade='all, delete-orphan')
    rewards = db.relationship('UserReward', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    principal_type = 'user'

    def get_id(self):
        return f'user:{self.id}'

    def set_password(self, password):
        """Hash and set the password."""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if password matches."""
        return bcrypt.check_password_hash(self.password_hash, password)

    def is_admin(self):
        """Check if user is admin."""
        return self.role == 'admin'

    def is_customer(self):
        """Check if user is a customer."""
        return self.role == 'customer'

    def get_default_address(self):
        """Get user's default delivery address."""
        return self.addresses.filter_by(is_default=True).first()

    # --- Wallet ---

    def credit_wallet(self, amount, description, type='credit', order_id=None, admin_id=None):
        """Add money to the wallet and record the transaction."""
        amount = money(amount)
        if amount <= 0:
            raise ValueError('Amount must be greater than 0')
        self.wallet_balance = money((self.wallet_balance or 0) + amount)
        transaction = WalletTransaction(
            user=self,
            type=type,
            amount=amount,
            description=description,
            order_id=order_id,
            admin_id=admin_id,
            balance_after=self.wallet_balance
        )
        db.session.add(transaction)
        return transaction

    def debit_wallet(self, amount, description, type='debit', order_id=None, admin_id=None):
        """Take money from the wallet. Raises ValueError when the balance is short."""
        amount = money(amount)
        if amount <= 0:
            raise ValueError('Amount must be greater than 0')
        if amount > money(self.wallet_balance):
            raise ValueError('Insufficient wallet balance')
        self.wallet_balance = money(self.wallet_balance - amount)
        transaction = WalletTransaction(
            user=self,
            type=type,
            amount=amount,
            description=description,
            order_id=order_id,
            admin_id=admin_id,
            balance_after=self.wallet_balance
        )
        db.session.add(transaction)
        return transaction

    # --- Loyalty ---

    def add_loyalty_points(self, points, description, type='earned', order_id=None):
        """Change the points balance and keep the tier in step."""
        if points == 0:
            return None
        if points < 0 and self.loyalty_points + points < 0:
            raise ValueError('Insufficient loyalty points')
        self.loyalty_points = (self.loyalty_points or 0) + points
        self.loyalty_tier = tier_for_points(self.loyalty_points)
        transaction = LoyaltyTransaction(
            user=self,
            type=type,
            points=points,
            description=description,
            order_id=order_id
        )
        db.session.add(transaction)
        return transaction

    def record_purchase(self, order, rupees_per_point):
        """Award points for a placed order and update spend counters."""
        self.total_spent = money((self.total_spent or 0) + order.total)
        self.order_count = (self.order_count or 0) + 1
        points = int(order.total // rupees_per_point) if rupees_per_point else 0
        if points > 0:
            self.add_loyalty_points(points, f'Points earned on order {order.order_number}',
                                    order_id=order.id)
        return points

    def tier_rank(self):
        return TIER_ORDER.index(self.loyalty_tier or 'Bronze')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'phone': self.phone,
            'name': self.name,
            'role': self.role,
            'is_active': self.is_active,
            'birthday': self.birthday,
            'anniversary': self.anniversary,
            'loyalty_points': self.loyalty_points,
            'loyalty_tier': self.loyalty_tier,
            'total_spent': money(self.total_spent),
            'order_count': self.order_count,
            'wallet_balance': money(self.wallet_balance),
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.email}>'


class Address(db.Model):
    """Saved delivery address."""
    __tablename__ = 'addresses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    label = db.Column(db.String(20), default='home')  # home, work, other
    name = db.Column(db.String(100), nullable=False)
    full_address = db.Column(db.String(500), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    pincode = db.Column(db.String(6), nullable=False)
    landmark = db.Column(db.String(200))
    is_default = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def make_default(self):
        """Mark this address as the user's only default."""
        Address.query.filter(
            Address.user_id == self.user_id,
            Address.id != self.id
        ).update({'is_default': False}, synchronize_session=False)
        self.is_default = True

    def to_dict(self):
        return {
            'id': self.id,
            'label': self.label,
            'name': self.name,
            'full_address': self.full_address,
            'city': self.city,
            'pincode': self.pincode,
            'landmark': self.landmark,
            'is_default': self.is_default,
        }

    def __repr__(self):
        return f'<Address {self.label} - {self.city}>'
