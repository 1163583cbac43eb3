"""Admin-editable runtime settings."""

import json
from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat, parse_bool


class AdminConfig(db.Model):
    __tablename__ = 'admin_config'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), default='string')  # string, number, boolean, json
    description = db.Column(db.String(255))
    category = db.Column(db.String(50), default='general')
    updated_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    TYPES = ('string', 'number', 'boolean', 'json')

    @property
    def typed_value(self):
        """Value converted according to its declared type."""
        if self.type == 'number':
            number = float(self.value)
            return int(number) if number.is_integer() else number
        if self.type == 'boolean':
            return parse_bool(self.value)
        if self.type == 'json':
            return json.loads(self.value)
        return self.value

    @staticmethod
    def serialise(value, type):
        if type == 'json':
            return json.dumps(value)
        if type == 'boolean':
            return 'true' if parse_bool(value) else 'false'
        return str(value)

    @staticmethod
    def get_value(key, default=None):
        """Typed value of a setting, or the default when it is missing or malformed."""
        setting = AdminConfig.query.filter_by(key=key).first()
        if setting is None:
            return default
        try:
            return setting.typed_value
        except ValueError:
            return default

    def to_dict(self):
        return {
            'id': self.id,
            'key': self.key,
            'value': self.value,
            'typed_value': self.typed_value,
            'type': self.type,
            'description': self.description,
            'category': self.category,
            'updated_by': self.updated_by,
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<AdminConfig {self.key}>'
