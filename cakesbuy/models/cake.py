"""Cake (product) and Addon models."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, money
from .category import unique_slug


class Cake(db.Model):
    """Cake product model."""
    __tablename__ = 'cakes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    slug = db.Column(db.String(170), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'))
    base_price = db.Column(db.Float, nullable=False)
    images = db.Column(db.JSON, default=list)
    flavors = db.Column(db.JSON, default=list)
    weights = db.Column(db.JSON, default=list)  # [{"weight": "1kg", "price": 899}]
    is_eggless = db.Column(db.Boolean, default=False)
    is_customizable = db.Column(db.Boolean, default=False)
    is_available = db.Column(db.Boolean, default=True)
    is_bestseller = db.Column(db.Boolean, default=False)
    is_photo_cake = db.Column(db.Boolean, default=False)
    photo_preview_shape = db.Column(db.String(20), default='circle')  # circle, heart, square
    tags = db.Column(db.JSON, default=list)
    rating = db.Column(db.Float, default=0.0)
    review_count = db.Column(db.Integer, default=0)
    delivery_options = db.Column(db.JSON, default=lambda: {
        'same_day': True,
        'midnight': False,
        'scheduled': True,
    })
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reviews = db.relationship('Review', backref='cake', lazy='dynamic', cascade='all, delete-orphan')

    def generate_slug(self, source=None):
        self.slug = unique_slug(Cake, source or self.name, self.id, fallback='cake')

    def price_for(self, weight=None):
        """Price of the given weight option, or the base price."""
        for option in self.weights or []:
            if weight and option.get('weight') == weight:
                return money(option.get('price'))
        return money(self.base_price)

    def update_rating(self):
        """Recalculate the average rating from reviews."""
        reviews = self.reviews.all()
        self.review_count = len(reviews)
        if reviews:
            self.rating = round(sum(r.rating for r in reviews) / len(reviews), 1)
        else:
            self.rating = 0.0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'category_id': self.category_id,
            'category': self.category.name if self.category else None,
            'base_price': money(self.base_price),
            'images': self.images or [],
            'flavors': self.flavors or [],
            'weights': self.weights or [],
            'is_eggless': self.is_eggless,
            'is_customizable': self.is_customizable,
            'is_available': self.is_available,
            'is_bestseller': self.is_bestseller,
            'is_photo_cake': self.is_photo_cake,
            'photo_preview_shape': self.photo_preview_shape,
            'tags': self.tags or [],
            'rating': self.rating,
            'review_count': self.review_count,
            'delivery_options': self.delivery_options,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Cake {self.name}>'


class Addon(db.Model):
    """Extras sold with a cake: balloons, candles, cards, flowers."""
    __tablename__ = 'addons'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Float, nullable=False)
    category = db.Column(db.String(20), nullable=False)  # balloons, candles, cards, flowers
    images = db.Column(db.JSON, default=list)
    is_available = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': money(self.price),
            'category': self.category,
            'images': self.images or [],
            'is_available': self.is_available,
        }

    def __repr__(self):
        return f'<Addon {self.name}>'
