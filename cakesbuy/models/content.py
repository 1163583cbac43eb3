"""CMS pages and storefront navigation."""

from datetime import datetime
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import isoformat
from .category import Category, unique_slug


class Page(db.Model):
    __tablename__ = 'pages'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(220), unique=True, nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    meta_title = db.Column(db.String(200))
    meta_description = db.Column(db.String(500))
    is_published = db.Column(db.Boolean, default=True)
    show_in_menu = db.Column(db.Boolean, default=False)
    menu_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def generate_slug(self, source=None):
        self.slug = unique_slug(Page, source or self.title, self.id, fallback='page')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'slug': self.slug,
            'content': self.content,
            'meta_title': self.meta_title,
            'meta_description': self.meta_description,
            'is_published': self.is_published,
            'show_in_menu': self.show_in_menu,
            'menu_order': self.menu_order,
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Page {self.slug}>'


class NavigationItem(db.Model):
    __tablename__ = 'navigation_items'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    url = db.Column(db.String(255), nullable=False)
    position = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    is_new = db.Column(db.Boolean, default=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    category = db.relationship('Category')

    def fill_defaults(self):
        """Derive slug, url and position when they were not given."""
        if not self.slug:
            self.slug = unique_slug(NavigationItem, self.name, self.id, fallback='nav')
        if not self.url:
            category = self.category
            if category is None and self.category_id:
                category = Category.query.get(self.category_id)
            if category is not None:
                self.url = f'/category/{category.slug}'
            else:
                self.url = f'/{self.slug}'
        if self.position is None:
            last = NavigationItem.query.order_by(NavigationItem.position.desc()).first()
            self.position = (last.position + 1) if last else 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'url': self.url,
            'position': self.position,
            'is_active': self.is_active,
            'is_new': self.is_new,
            'category_id': self.category_id,
        }

    def __repr__(self):
        return f'<NavigationItem {self.name}>'
