"""Product reviews and post-delivery order ratings."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat


class Review(db.Model):
    """Customer review of a cake."""
    __tablename__ = 'reviews'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    cake_id = db.Column(db.Integer, db.ForeignKey('cakes.id'), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'))
    rating = db.Column(db.Integer, nullable=False)  # 1-5
    comment = db.Column(db.Text)
    is_verified = db.Column(db.Boolean, default=False)  # Reviewer bought the cake
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'cake_id': self.cake_id,
            'order_id': self.order_id,
            'rating': self.rating,
            'comment': self.comment,
            'is_verified': self.is_verified,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Review {self.rating} stars>'


class OrderRating(db.Model):
    """Feedback left once an order is delivered."""
    __tablename__ = 'order_ratings'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    overall_rating = db.Column(db.Integer, nullable=False)
    taste_rating = db.Column(db.Integer)
    quality_rating = db.Column(db.Integer)
    delivery_rating = db.Column(db.Integer)
    packaging_rating = db.Column(db.Integer)
    comment = db.Column(db.Text)
    improvements = db.Column(db.Text)
    would_recommend = db.Column(db.Boolean, default=True)
    delivery_boy_rating = db.Column(db.Integer)
    delivery_boy_comment = db.Column(db.Text)
    feedback_email_sent = db.Column(db.Boolean, default=False)
    feedback_email_sent_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    RATING_FIELDS = ('overall_rating', 'taste_rating', 'quality_rating', 'delivery_rating',
                     'packaging_rating', 'delivery_boy_rating')

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.RATING_FIELDS}
        data.update({
            'id': self.id,
            'order_id': self.order_id,
            'order_number': self.order.order_number if self.order else None,
            'user_id': self.user_id,
            'comment': self.comment,
            'improvements': self.improvements,
            'would_recommend': self.would_recommend,
            'delivery_boy_comment': self.delivery_boy_comment,
            'feedback_email_sent': self.feedback_email_sent,
            'created_at': isoformat(self.created_at),
        })
        return data

    def __repr__(self):
        return f'<OrderRating {self.order_id}: {self.overall_rating}>'
