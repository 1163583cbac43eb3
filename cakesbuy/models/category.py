"""Category model."""

from datetime import datetime
from slugify import slugify
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat


def unique_slug(model, value, instance_id=None, fallback='item'):
    """Slugify a name and suffix it until no other row of the model uses it."""
    base_slug = slugify(value) if value else fallback
    slug = base_slug
    counter = 1
    while True:
        existing = model.query.filter_by(slug=slug).first()
        if existing is None or existing.id == instance_id:
            return slug
        slug = f'{base_slug}-{counter}'
        counter += 1


class Category(db.Model):
    """Cake category, optionally nested under a parent."""
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)
    image = db.Column(db.String(255))
    parent_id = db.Column(db.Integer, db.ForeignKey('categories.id'))
    is_active = db.Column(db.Boolean, default=True)
    show_on_homepage = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cakes = db.relationship('Cake', backref='category', lazy='dynamic')
    children = db.relationship('Category', backref=db.backref('parent', remote_side=[id]), lazy='dynamic')

    def generate_slug(self, source=None):
        self.slug = unique_slug(Category, source or self.name, self.id, fallback='category')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'image': self.image,
            'parent_id': self.parent_id,
            'is_active': self.is_active,
            'show_on_homepage': self.show_on_homepage,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Category {self.name}>'
