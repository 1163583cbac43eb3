"""Event reminder model."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat


class EventReminder(db.Model):
    """Birthday or anniversary a customer wants to be reminded about."""
    __tablename__ = 'event_reminders'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    event_type = db.Column(db.String(20), nullable=False)  # birthday, anniversary, other
    event_date = db.Column(db.String(5), nullable=False)  # MM-DD
    relationship_type = db.Column(db.String(50), default='self')
    title = db.Column(db.String(200), nullable=False)
    reminder_date = db.Column(db.DateTime, nullable=False)
    is_processed = db.Column(db.Boolean, default=False)
    notification_sent = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self, include_user=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'event_type': self.event_type,
            'event_date': self.event_date,
            'relationship_type': self.relationship_type,
            'title': self.title,
            'reminder_date': isoformat(self.reminder_date),
            'is_processed': self.is_processed,
            'notification_sent': self.notification_sent,
            'created_at': isoformat(self.created_at),
        }
        if include_user and self.user:
            data['user'] = {
                'id': self.user.id,
                'name': self.user.name,
                'email': self.user.email,
                'phone': self.user.phone,
            }
        return data

    def __repr__(self):
        return f'<EventReminder {self.event_type} {self.event_date}>'
