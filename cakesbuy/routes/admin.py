"""Admin back-office routes."""

import logging
from datetime import datetime
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import func, or_
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error, populate_from_json
from cakesbuy.forms.admin import (CategoryForm, CakeForm, AddonForm, DeliveryAreaForm, PromoCodeForm,
                                  PageForm, NavigationItemForm, WalletAdjustmentForm, AdminConfigForm,
                                  UserForm, LoyaltyRewardForm)
from cakesbuy.forms.auth import LoginForm
from cakesbuy.forms.partners import DeliveryBoyForm, DeliveryBoyUpdateForm
from cakesbuy.models import (User, Category, Cake, Addon, DeliveryArea, PromoCode, Order, DeliveryBoy,
                             Vendor, EventReminder, Notification, Page, NavigationItem, AdminConfig,
                             WalletTransaction, LoyaltyReward, OrderRating, OrderStatusHistory, Invoice)
from cakesbuy.services import emails, whatsapp
from cakesbuy.services.notifications import notify_assignment, notify_status_change
from cakesbuy.utils.decorators import admin_required
from cakesbuy.utils.helpers import json_body, money, next_occurrence, parse_datetime
from cakesbuy.utils.tokens import create_token

admin_bp = Blueprint('admin', __name__)
logger = logging.getLogger(__name__)


def _paginate(query, key, default_limit=20):
    """Paginate a query from ?page and ?limit into a JSON payload."""
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', default_limit, type=int)
    pagination = query.paginate(page=page, per_page=max(1, min(limit, 100)), error_out=False)
    return jsonify({
        key: [item.to_dict() for item in pagination.items],
        'total': pagination.total,
        'pages': pagination.pages,
        'current_page': page
    })


def _search(query, *columns):
    term = request.args.get('search', '').strip()
    if term:
        query = query.filter(or_(*[column.ilike(f'%{term}%') for column in columns]))
    return query


def _json():
    return json_body()


@admin_bp.route('/login', methods=['POST'])
def login():
    """Admin login."""
    form = LoginForm()
    if not form.validate_on_submit():
        return validation_error(form)

    user = User.query.filter_by(phone=form.phone.data.strip()).first()
    if not user or not user.check_password(form.password.data):
        return jsonify({'message': 'Invalid phone number or password'}), 401
    if not user.is_admin():
        return jsonify({'message': 'Admin access required'}), 403
    if not user.is_active:
        return jsonify({'message': 'Your account has been deactivated'}), 403

    return jsonify({'message': 'Login successful', 'user': user.to_dict(), 'token': create_token(user)})


@admin_bp.route('/dashboard')
@login_required
@admin_required
def dashboard():
    """Admin dashboard with shop overview."""
    today = datetime.utcnow().date()

    total_revenue = db.session.query(
        func.sum(Order.total)
    ).filter(Order.status == 'delivered').scalar() or 0

    recent_orders = Order.query.order_by(Order.created_at.desc()).limit(10).all()

    return jsonify({
        'total_users': User.query.filter_by(role='customer').count(),
        'total_orders': Order.query.count(),
        'today_orders': Order.query.filter(func.date(Order.created_at) == today).count(),
        'pending_orders': Order.query.filter_by(status='pending').count(),
        'total_revenue': money(total_revenue),
        'active_vendors': Vendor.query.filter_by(is_active=True).count(),
        'pending_vendors': Vendor.query.filter_by(is_active=False, is_verified=False).count(),
        'active_delivery_boys': DeliveryBoy.query.filter_by(is_active=True).count(),
        'recent_orders': [o.to_dict(include_items=False) for o in recent_orders]
    })


# --- Categories ---

@admin_bp.route('/categories')
@login_required
@admin_required
def categories():
    return jsonify([c.to_dict() for c in Category.query.order_by(Category.name).all()])


@admin_bp.route('/categories/paginated')
@login_required
@admin_required
def categories_paginated():
    query = _search(Category.query, Category.name, Category.description)
    return _paginate(query.order_by(Category.created_at.desc()), 'categories')


@admin_bp.route('/categories', methods=['POST'])
@login_required
@admin_required
def create_category():
    data = _json()
    form = CategoryForm()
    if not form.validate_on_submit():
        return validation_error(form)

    category = Category()
    populate_from_json(form, category, data, exclude=('slug',))
    category.generate_slug(form.slug.data)
    db.session.add(category)
    db.session.commit()
    return jsonify(category.to_dict()), 201


@admin_bp.route('/categories/<int:category_id>', methods=['PUT'])
@login_required
@admin_required
def update_category(category_id):
    category = Category.query.get_or_404(category_id)
    data = _json()
    form = CategoryForm(obj=category)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, category, data, exclude=('slug',))
    if data.get('slug') or 'name' in data:
        category.generate_slug(data.get('slug'))
    db.session.commit()
    return jsonify(category.to_dict())


@admin_bp.route('/categories/<int:category_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_category(category_id):
    category = Category.query.get_or_404(category_id)
    if category.cakes.count():
        return jsonify({'message': 'Category still has cakes. Move or delete them first.'}), 400
    db.session.delete(category)
    db.session.commit()
    return jsonify({'message': 'Category deleted'})


# --- Cakes ---

def _apply_cake_lists(cake, data):
    """Copy list and JSON attributes of a cake from the payload."""
    for field in ('images', 'flavors', 'tags'):
        if field in data:
            value = data[field] or []
            if not isinstance(value, list):
                raise ValueError(f'{field} must be a list')
            setattr(cake, field, [str(v) for v in value])

    if 'weights' in data:
        weights = []
        for option in data['weights'] or []:
            if not isinstance(option, dict) or not option.get('weight'):
                raise ValueError('Each weight needs a weight and a price')
            weights.append({'weight': str(option['weight']), 'price': money(float(option.get('price')))})
        cake.weights = weights

    if 'delivery_options' in data:
        options = data['delivery_options'] or {}
        if not isinstance(options, dict):
            raise ValueError('delivery_options must be an object')
        cake.delivery_options = {
            'same_day': bool(options.get('same_day', True)),
            'midnight': bool(options.get('midnight', False)),
            'scheduled': bool(options.get('scheduled', True)),
        }


@admin_bp.route('/cakes')
@login_required
@admin_required
def cakes():
    return jsonify([c.to_dict() for c in Cake.query.order_by(Cake.created_at.desc()).all()])


@admin_bp.route('/cakes/paginated')
@login_required
@admin_required
def cakes_paginated():
    query = _search(Cake.query, Cake.name, Cake.description)
    category_id = request.args.get('category_id', type=int)
    if category_id:
        query = query.filter_by(category_id=category_id)
    return _paginate(query.order_by(Cake.created_at.desc()), 'cakes')


@admin_bp.route('/cakes', methods=['POST'])
@login_required
@admin_required
def create_cake():
    data = _json()
    form = CakeForm()
    if not form.validate_on_submit():
        return validation_error(form)

    cake = Cake()
    populate_from_json(form, cake, data, exclude=('slug',))
    try:
        _apply_cake_lists(cake, data)
    except (TypeError, ValueError) as e:
        return jsonify({'message': str(e)}), 400
    cake.generate_slug(form.slug.data)
    db.session.add(cake)
    db.session.commit()
    logger.info('Cake %s created', cake.slug)
    return jsonify(cake.to_dict()), 201


@admin_bp.route('/cakes/<int:cake_id>', methods=['PUT'])
@login_required
@admin_required
def update_cake(cake_id):
    cake = Cake.query.get_or_404(cake_id)
    data = _json()
    form = CakeForm(obj=cake)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, cake, data, exclude=('slug',))
    try:
        _apply_cake_lists(cake, data)
    except (TypeError, ValueError) as e:
        return jsonify({'message': str(e)}), 400
    if data.get('slug') or 'name' in data:
        cake.generate_slug(data.get('slug'))
    db.session.commit()
    return jsonify(cake.to_dict())


@admin_bp.route('/cakes/<int:cake_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_cake(cake_id):
    cake = Cake.query.get_or_404(cake_id)
    db.session.delete(cake)
    db.session.commit()
    return jsonify({'message': 'Cake deleted'})


# --- Addons ---

@admin_bp.route('/addons')
@login_required
@admin_required
def addons():
    return jsonify([a.to_dict() for a in Addon.query.order_by(Addon.category, Addon.name).all()])


@admin_bp.route('/addons/paginated')
@login_required
@admin_required
def addons_paginated():
    query = _search(Addon.query, Addon.name, Addon.description)
    return _paginate(query.order_by(Addon.created_at.desc()), 'addons')


@admin_bp.route('/addons', methods=['POST'])
@login_required
@admin_required
def create_addon():
    data = _json()
    form = AddonForm()
    if not form.validate_on_submit():
        return validation_error(form)

    addon = Addon()
    populate_from_json(form, addon, data)
    if isinstance(data.get('images'), list):
        addon.images = data['images']
    db.session.add(addon)
    db.session.commit()
    return jsonify(addon.to_dict()), 201


@admin_bp.route('/addons/<int:addon_id>', methods=['PUT'])
@login_required
@admin_required
def update_addon(addon_id):
    addon = Addon.query.get_or_404(addon_id)
    data = _json()
    form = AddonForm(obj=addon)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, addon, data)
    if isinstance(data.get('images'), list):
        addon.images = data['images']
    db.session.commit()
    return jsonify(addon.to_dict())


@admin_bp.route('/addons/<int:addon_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_addon(addon_id):
    addon = Addon.query.get_or_404(addon_id)
    db.session.delete(addon)
    db.session.commit()
    return jsonify({'message': 'Addon deleted'})


# --- Delivery areas ---

@admin_bp.route('/delivery-areas')
@login_required
@admin_required
def delivery_areas():
    return jsonify([a.to_dict() for a in DeliveryArea.query.order_by(DeliveryArea.name).all()])


@admin_bp.route('/delivery-areas/paginated')
@login_required
@admin_required
def delivery_areas_paginated():
    query = _search(DeliveryArea.query, DeliveryArea.name, DeliveryArea.pincode)
    return _paginate(query.order_by(DeliveryArea.name), 'delivery_areas')


@admin_bp.route('/delivery-areas', methods=['POST'])
@login_required
@admin_required
def create_delivery_area():
    data = _json()
    form = DeliveryAreaForm()
    if not form.validate_on_submit():
        return validation_error(form)
    if DeliveryArea.query.filter_by(pincode=form.pincode.data).first():
        return jsonify({'message': 'A delivery area with this pincode already exists'}), 400

    area = DeliveryArea()
    populate_from_json(form, area, data)
    db.session.add(area)
    db.session.commit()
    return jsonify(area.to_dict()), 201


@admin_bp.route('/delivery-areas/<int:area_id>', methods=['PUT'])
@login_required
@admin_required
def update_delivery_area(area_id):
    area = DeliveryArea.query.get_or_404(area_id)
    data = _json()
    form = DeliveryAreaForm(obj=area)
    if not form.validate_on_submit():
        return validation_error(form)
    clash = DeliveryArea.query.filter(DeliveryArea.pincode == form.pincode.data,
                                      DeliveryArea.id != area.id).first()
    if clash:
        return jsonify({'message': 'A delivery area with this pincode already exists'}), 400

    populate_from_json(form, area, data)
    db.session.commit()
    return jsonify(area.to_dict())


@admin_bp.route('/delivery-areas/<int:area_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_delivery_area(area_id):
    area = DeliveryArea.query.get_or_404(area_id)
    db.session.delete(area)
    db.session.commit()
    return jsonify({'message': 'Delivery area deleted'})


# --- Promo codes ---

def _apply_promo_dates(promo, data):
    for field in ('valid_from', 'valid_until'):
        if field in data:
            setattr(promo, field, parse_datetime(data[field]))
    if promo.valid_from and promo.valid_until and promo.valid_until < promo.valid_from:
        raise ValueError('valid_until must be after valid_from')


@admin_bp.route('/promo-codes')
@login_required
@admin_required
def promo_codes():
    codes = PromoCode.query.order_by(PromoCode.created_at.desc()).all()
    return jsonify([c.to_dict() for c in codes])


@admin_bp.route('/promo-codes', methods=['POST'])
@login_required
@admin_required
def create_promo_code():
    data = _json()
    form = PromoCodeForm()
    if not form.validate_on_submit():
        return validation_error(form)

    code = form.code.data.strip().upper()
    if PromoCode.query.filter_by(code=code).first():
        return jsonify({'message': 'Promo code already exists'}), 400

    promo = PromoCode()
    populate_from_json(form, promo, data, exclude=('code',))
    promo.code = code
    try:
        _apply_promo_dates(promo, data)
    except ValueError as e:
        return jsonify({'message': str(e)}), 400
    db.session.add(promo)
    db.session.commit()
    return jsonify(promo.to_dict()), 201


@admin_bp.route('/promo-codes/<int:promo_id>', methods=['PUT'])
@login_required
@admin_required
def update_promo_code(promo_id):
    promo = PromoCode.query.get_or_404(promo_id)
    data = _json()
    form = PromoCodeForm(obj=promo)
    if not form.validate_on_submit():
        return validation_error(form)

    code = form.code.data.strip().upper()
    if PromoCode.query.filter(PromoCode.code == code, PromoCode.id != promo.id).first():
        return jsonify({'message': 'Promo code already exists'}), 400

    populate_from_json(form, promo, data, exclude=('code',))
    promo.code = code
    try:
        _apply_promo_dates(promo, data)
    except ValueError as e:
        return jsonify({'message': str(e)}), 400
    db.session.commit()
    return jsonify(promo.to_dict())


@admin_bp.route('/promo-codes/<int:promo_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_promo_code(promo_id):
    promo = PromoCode.query.get_or_404(promo_id)
    db.session.delete(promo)
    db.session.commit()
    return jsonify({'message': 'Promo code deleted'})


# --- Orders ---

@admin_bp.route('/orders')
@login_required
@admin_required
def orders():
    query = Order.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    query = _search(query, Order.order_number)
    return _paginate(query.order_by(Order.created_at.desc()), 'orders')


@admin_bp.route('/orders/<int:order_id>')
@login_required
@admin_required
def order_detail(order_id):
    order = Order.query.get_or_404(order_id)
    data = order.to_dict()
    history = order.status_history.order_by(OrderStatusHistory.created_at, OrderStatusHistory.id)
    data['status_history'] = [h.to_dict() for h in history]
    data['customer'] = order.customer.to_dict() if order.customer else None
    data['delivery_boy'] = order.delivery_boy.to_dict() if order.delivery_boy else None
    data['vendor'] = order.vendor.to_dict() if order.vendor else None
    return jsonify(data)


@admin_bp.route('/orders/<int:order_id>/status', methods=['PATCH'])
@login_required
@admin_required
def update_order_status(order_id):
    """Move an order along its status workflow."""
    order = Order.query.get_or_404(order_id)
    data = _json()
    status = data.get('status')
    if not status:
        return jsonify({'message': 'Status is required'}), 400

    ok, message = order.update_status(status, data.get('notes'))
    if not ok:
        return jsonify({'message': message}), 400

    db.session.commit()
    logger.info('Order %s set to %s by admin %s', order.order_number, status, current_user.id)
    notify_status_change(order)
    return jsonify({'message': message, 'order': order.to_dict()})


@admin_bp.route('/orders/<int:order_id>/assign', methods=['POST'])
@login_required
@admin_required
def assign_delivery_boy(order_id):
    """Hand an order to a delivery boy."""
    order = Order.query.get_or_404(order_id)
    data = _json()

    delivery_boy = DeliveryBoy.query.get(data['delivery_boy_id']) if data.get('delivery_boy_id') else None
    if not delivery_boy or not delivery_boy.is_active:
        return jsonify({'message': 'Delivery boy not found or inactive'}), 400
    if order.status in ('delivered', 'cancelled'):
        return jsonify({'message': f'Cannot assign a {order.status} order'}), 400

    delivery_price = data.get('delivery_price')
    if delivery_price is not None:
        try:
            order.delivery_fee = money(float(delivery_price))
        except (TypeError, ValueError):
            return jsonify({'message': 'Delivery price must be a number'}), 400

    order.delivery_boy_id = delivery_boy.id
    order.assigned_at = datetime.utcnow()
    db.session.commit()
    logger.info('Order %s assigned to delivery boy %s', order.order_number, delivery_boy.id)

    notify_assignment(delivery_boy, order)
    return jsonify({'message': f'Order assigned to {delivery_boy.name}', 'order': order.to_dict()})


@admin_bp.route('/orders/<int:order_id>/assign-vendor', methods=['PATCH'])
@login_required
@admin_required
def assign_vendor(order_id):
    order = Order.query.get_or_404(order_id)
    data = _json()

    if not data.get('vendor_id'):
        return jsonify({'message': 'Vendor is required'}), 400
    try:
        vendor_price = money(float(data.get('vendor_price')))
    except (TypeError, ValueError):
        return jsonify({'message': 'Vendor price must be a number'}), 400

    vendor = Vendor.query.get(data['vendor_id'])
    if not vendor or not vendor.is_active:
        return jsonify({'message': 'Vendor not found or inactive'}), 400

    order.vendor_id = vendor.id
    order.vendor_price = vendor_price
    order.vendor_assigned_at = datetime.utcnow()
    db.session.commit()
    logger.info('Order %s assigned to vendor %s', order.order_number, vendor.id)
    return jsonify({'message': f'Order assigned to {vendor.business_name}', 'order': order.to_dict()})


# --- Delivery boys ---

@admin_bp.route('/delivery-boys')
@login_required
@admin_required
def delivery_boys():
    boys = DeliveryBoy.query.order_by(DeliveryBoy.created_at.desc()).all()
    return jsonify([b.to_dict() for b in boys])


@admin_bp.route('/delivery-boys', methods=['POST'])
@login_required
@admin_required
def create_delivery_boy():
    data = _json()
    form = DeliveryBoyForm()
    if not form.validate_on_submit():
        return validation_error(form)

    delivery_boy = DeliveryBoy()
    populate_from_json(form, delivery_boy, data)
    delivery_boy.set_password(form.password.data)
    db.session.add(delivery_boy)
    db.session.commit()
    return jsonify(delivery_boy.to_dict()), 201


@admin_bp.route('/delivery-boys/<int:boy_id>', methods=['PUT'])
@login_required
@admin_required
def update_delivery_boy(boy_id):
    delivery_boy = DeliveryBoy.query.get_or_404(boy_id)
    data = _json()
    form = DeliveryBoyUpdateForm(instance=delivery_boy)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, delivery_boy, data)
    if form.password.data:
        delivery_boy.set_password(form.password.data)
    db.session.commit()
    return jsonify(delivery_boy.to_dict())


@admin_bp.route('/delivery-boys/<int:boy_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_delivery_boy(boy_id):
    delivery_boy = DeliveryBoy.query.get_or_404(boy_id)
    active = delivery_boy.orders.filter(Order.status.in_(['confirmed', 'preparing', 'out_for_delivery'])).count()
    if active:
        return jsonify({'message': 'Delivery boy has active orders'}), 400
    delivery_boy.orders.update({'delivery_boy_id': None}, synchronize_session=False)
    db.session.delete(delivery_boy)
    db.session.commit()
    return jsonify({'message': 'Delivery boy deleted'})


@admin_bp.route('/delivery-boys/<int:boy_id>/orders')
@login_required
@admin_required
def delivery_boy_orders(boy_id):
    delivery_boy = DeliveryBoy.query.get_or_404(boy_id)
    query = delivery_boy.orders
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    return jsonify([o.to_dict() for o in query.order_by(Order.assigned_at.desc()).all()])


# --- Vendors ---

@admin_bp.route('/vendors')
@login_required
@admin_required
def vendors():
    query = _search(Vendor.query, Vendor.name, Vendor.business_name, Vendor.email, Vendor.phone)
    return _paginate(query.order_by(Vendor.created_at.desc()), 'vendors')


@admin_bp.route('/vendors/<int:vendor_id>/approve', methods=['PATCH'])
@login_required
@admin_required
def approve_vendor(vendor_id):
    vendor = Vendor.query.get_or_404(vendor_id)
    vendor.approve(current_user)
    db.session.commit()
    logger.info('Vendor %s approved by admin %s', vendor.id, current_user.id)
    return jsonify({'message': f'{vendor.business_name} approved', 'vendor': vendor.to_dict()})


@admin_bp.route('/vendors/<int:vendor_id>/deactivate', methods=['PATCH'])
@login_required
@admin_required
def deactivate_vendor(vendor_id):
    vendor = Vendor.query.get_or_404(vendor_id)
    vendor.is_active = False
    db.session.commit()
    return jsonify({'message': f'{vendor.business_name} deactivated', 'vendor': vendor.to_dict()})


# --- Users ---

@admin_bp.route('/users')
@login_required
@admin_required
def users():
    query = _search(User.query, User.name, User.email, User.phone)
    role = request.args.get('role')
    if role:
        query = query.filter_by(role=role)
    return _paginate(query.order_by(User.created_at.desc()), 'users')


@admin_bp.route('/users', methods=['POST'])
@login_required
@admin_required
def create_user():
    data = _json()
    form = UserForm()
    if not form.validate_on_submit():
        return validation_error(form)
    if not form.password.data:
        return jsonify({'message': 'Password is required'}), 400

    email = form.email.data.strip().lower()
    phone = form.phone.data.strip()
    if User.query.filter(or_(User.email == email, User.phone == phone)).first():
        return jsonify({'message': 'A user with this email or phone already exists'}), 400

    user = User()
    populate_from_json(form, user, data, exclude=('email', 'phone'))
    user.email = email
    user.phone = phone
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    return jsonify(user.to_dict()), 201


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@login_required
@admin_required
def update_user(user_id):
    user = User.query.get_or_404(user_id)
    data = _json()
    form = UserForm(obj=user)
    if not form.validate_on_submit():
        return validation_error(form)

    email = form.email.data.strip().lower()
    phone = form.phone.data.strip()
    clash = User.query.filter(or_(User.email == email, User.phone == phone), User.id != user.id).first()
    if clash:
        return jsonify({'message': 'A user with this email or phone already exists'}), 400

    populate_from_json(form, user, data, exclude=('email', 'phone'))
    user.email = email
    user.phone = phone
    if form.password.data:
        user.set_password(form.password.data)
    for field in ('birthday', 'anniversary'):
        if field in data:
            setattr(user, field, data[field] or None)
    db.session.commit()
    return jsonify(user.to_dict())


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_user(user_id):
    user = User.query.get_or_404(user_id)
    if user.id == current_user.id:
        return jsonify({'message': 'You cannot delete your own account'}), 400
    # Keep orders for the books, detached from the account
    user.orders.update({'user_id': None}, synchronize_session=False)
    db.session.delete(user)
    db.session.commit()
    return jsonify({'message': 'User deleted'})


def _upcoming_events(days):
    """Customer birthdays and anniversaries falling in the next `days` days."""
    today = datetime.utcnow().date()
    events = []
    users = User.query.filter(
        User.is_active == True,  # noqa: E712
        or_(User.birthday.isnot(None), User.anniversary.isnot(None))
    ).all()
    for user in users:
        for event_type in ('birthday', 'anniversary'):
            month_day = getattr(user, event_type)
            if not month_day:
                continue
            try:
                event_day = next_occurrence(month_day, today)
            except ValueError:
                continue
            days_until = (event_day - today).days
            if days_until <= days:
                events.append({
                    'user': user,
                    'event_type': event_type,
                    'event_date': month_day,
                    'date': event_day,
                    'days_until': days_until,
                })
    return sorted(events, key=lambda e: e['days_until'])


@admin_bp.route('/users/upcoming-events')
@login_required
@admin_required
def upcoming_events():
    days = request.args.get('days', 30, type=int)
    return jsonify([{
        'user_id': e['user'].id,
        'name': e['user'].name,
        'email': e['user'].email,
        'phone': e['user'].phone,
        'event_type': e['event_type'],
        'event_date': e['event_date'],
        'date': e['date'].isoformat(),
        'days_until': e['days_until'],
    } for e in _upcoming_events(days)])


# --- Wallet ---

def _wallet_adjustment(debit):
    form = WalletAdjustmentForm()
    if not form.validate_on_submit():
        return validation_error(form)

    user = User.query.get(form.user_id.data)
    if not user:
        return jsonify({'message': 'User not found'}), 404

    try:
        if debit:
            transaction = user.debit_wallet(form.amount.data, form.description.data,
                                            type='admin_debit', admin_id=current_user.id)
        else:
            transaction = user.credit_wallet(form.amount.data, form.description.data,
                                             type='admin_credit', admin_id=current_user.id)
    except ValueError as e:
        return jsonify({'message': str(e)}), 400

    db.session.commit()
    logger.info('Admin %s %s ₹%.2f for user %s', current_user.id, 'debited' if debit else 'credited',
                transaction.amount, user.id)
    return jsonify({
        'message': 'Wallet updated',
        'balance': money(user.wallet_balance),
        'transaction': transaction.to_dict()
    })


@admin_bp.route('/wallet/credit', methods=['POST'])
@login_required
@admin_required
def wallet_credit():
    return _wallet_adjustment(debit=False)


@admin_bp.route('/wallet/debit', methods=['POST'])
@login_required
@admin_required
def wallet_debit():
    return _wallet_adjustment(debit=True)


@admin_bp.route('/wallet/transactions/<int:user_id>')
@login_required
@admin_required
def user_wallet_transactions(user_id):
    user = User.query.get_or_404(user_id)
    transactions = user.wallet_transactions.order_by(
        WalletTransaction.created_at.desc(), WalletTransaction.id.desc()
    ).all()
    return jsonify({
        'user': user.to_dict(),
        'transactions': [t.to_dict() for t in transactions]
    })


# --- Loyalty rewards ---

@admin_bp.route('/loyalty/rewards')
@login_required
@admin_required
def loyalty_rewards():
    rewards = LoyaltyReward.query.order_by(LoyaltyReward.points_cost).all()
    return jsonify([r.to_dict() for r in rewards])


@admin_bp.route('/loyalty/rewards', methods=['POST'])
@login_required
@admin_required
def create_loyalty_reward():
    data = _json()
    form = LoyaltyRewardForm()
    if not form.validate_on_submit():
        return validation_error(form)

    reward = LoyaltyReward()
    populate_from_json(form, reward, data)
    db.session.add(reward)
    db.session.commit()
    return jsonify(reward.to_dict()), 201


# --- Settings ---

def _typed_setting_value(value, type):
    """Check a raw value against the setting type and serialise it for storage."""
    if type == 'number':
        float(value)
    serialised = AdminConfig.serialise(value, type)
    if type == 'json':
        AdminConfig(value=serialised, type=type).typed_value
    return serialised


@admin_bp.route('/config')
@login_required
@admin_required
def config_list():
    query = AdminConfig.query
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    return jsonify([c.to_dict() for c in query.order_by(AdminConfig.category, AdminConfig.key).all()])


@admin_bp.route('/config/<key>')
@login_required
@admin_required
def config_detail(key):
    setting = AdminConfig.query.filter_by(key=key).first()
    if not setting:
        return jsonify({'message': 'Setting not found'}), 404
    return jsonify(setting.to_dict())


@admin_bp.route('/config', methods=['POST'])
@login_required
@admin_required
def create_config():
    data = _json()
    form = AdminConfigForm()
    if not form.validate_on_submit():
        return validation_error(form)
    if 'value' not in data:
        return jsonify({'message': 'Value is required'}), 400
    if AdminConfig.query.filter_by(key=form.key.data).first():
        return jsonify({'message': 'Setting already exists'}), 400

    try:
        value = _typed_setting_value(data['value'], form.type.data)
    except (TypeError, ValueError):
        return jsonify({'message': f'Value is not a valid {form.type.data}'}), 400

    setting = AdminConfig(
        key=form.key.data,
        value=value,
        type=form.type.data,
        description=form.description.data,
        category=form.category.data or 'general',
        updated_by=current_user.id
    )
    db.session.add(setting)
    db.session.commit()
    return jsonify(setting.to_dict()), 201


@admin_bp.route('/config/<key>', methods=['PUT'])
@login_required
@admin_required
def update_config(key):
    setting = AdminConfig.query.filter_by(key=key).first()
    if not setting:
        return jsonify({'message': 'Setting not found'}), 404

    data = _json()
    if 'type' in data:
        if data['type'] not in AdminConfig.TYPES:
            return jsonify({'message': 'Invalid setting type'}), 400
        setting.type = data['type']
    if 'value' in data:
        try:
            setting.value = _typed_setting_value(data['value'], setting.type)
        except (TypeError, ValueError):
            return jsonify({'message': f'Value is not a valid {setting.type}'}), 400
    for field in ('description', 'category'):
        if field in data:
            setattr(setting, field, data[field])
    setting.updated_by = current_user.id
    db.session.commit()
    return jsonify(setting.to_dict())


@admin_bp.route('/config/<key>', methods=['DELETE'])
@login_required
@admin_required
def delete_config(key):
    setting = AdminConfig.query.filter_by(key=key).first()
    if not setting:
        return jsonify({'message': 'Setting not found'}), 404
    db.session.delete(setting)
    db.session.commit()
    return jsonify({'message': 'Setting deleted'})


# --- Reminders ---

@admin_bp.route('/reminders/pending')
@login_required
@admin_required
def pending_reminders():
    reminders = EventReminder.query.filter(
        EventReminder.reminder_date <= datetime.utcnow(),
        EventReminder.is_processed == False  # noqa: E712
    ).order_by(EventReminder.reminder_date).all()
    return jsonify([r.to_dict(include_user=True) for r in reminders])


@admin_bp.route('/reminders/send', methods=['POST'])
@login_required
@admin_required
def send_reminders():
    """Send reminder emails and WhatsApp messages, optionally with a discount."""
    data = _json()
    reminder_ids = data.get('reminder_ids') or []
    if not isinstance(reminder_ids, list) or not reminder_ids:
        return jsonify({'message': 'Select at least one reminder'}), 400

    discount_code = data.get('discount_code')
    discount_percentage = data.get('discount_percentage')

    results = []
    for reminder_id in reminder_ids:
        reminder = EventReminder.query.get(reminder_id)
        if not reminder or not reminder.user:
            results.append({'id': reminder_id, 'success': False, 'message': 'Reminder not found'})
            continue

        sent = emails.send_reminder_email(reminder, discount_code, discount_percentage)
        offer = f' Use code {discount_code} for {discount_percentage}% off.' if discount_code else ''
        whatsapp.send_message(reminder.user.phone,
                              f'{reminder.title} is coming up on {reminder.event_date}! '
                              f'Order a cake from CakesBuy.{offer}')
        if sent:
            reminder.is_processed = True
            reminder.notification_sent = True
            db.session.add(Notification(
                user_id=reminder.user_id,
                title=reminder.title,
                message=f'Coming up on {reminder.event_date}.{offer}',
                type='reminder'
            ))
            results.append({'id': reminder.id, 'success': True, 'message': 'Reminder sent'})
        else:
            results.append({'id': reminder.id, 'success': False, 'message': 'Failed to send email'})

    db.session.commit()
    total_sent = sum(1 for r in results if r['success'])
    return jsonify({
        'results': results,
        'total_sent': total_sent,
        'total_failed': len(results) - total_sent
    })


@admin_bp.route('/reminders/create-bulk', methods=['POST'])
@login_required
@admin_required
def create_bulk_reminders():
    """Create reminders for customer birthdays and anniversaries in the next N days."""
    data = _json()
    try:
        days = int(data.get('days', 7))
    except (TypeError, ValueError):
        return jsonify({'message': 'Days must be a number'}), 400

    created = 0
    skipped = 0
    now = datetime.utcnow()
    for event in _upcoming_events(days):
        user = event['user']
        exists = EventReminder.query.filter_by(
            user_id=user.id,
            event_type=event['event_type'],
            event_date=event['event_date'],
            is_processed=False
        ).first()
        if exists:
            skipped += 1
            continue
        label = 'Birthday' if event['event_type'] == 'birthday' else 'Anniversary'
        db.session.add(EventReminder(
            user_id=user.id,
            event_type=event['event_type'],
            event_date=event['event_date'],
            relationship_type='self',
            title=f"{user.name}'s {label}" if user.name else f'Your {label}',
            reminder_date=now
        ))
        created += 1

    db.session.commit()
    return jsonify({'message': f'{created} reminders created', 'created': created, 'skipped': skipped})


# --- Pages ---

@admin_bp.route('/pages')
@login_required
@admin_required
def pages():
    return jsonify([p.to_dict() for p in Page.query.order_by(Page.menu_order, Page.title).all()])


@admin_bp.route('/pages/<int:page_id>')
@login_required
@admin_required
def page_detail(page_id):
    return jsonify(Page.query.get_or_404(page_id).to_dict())


@admin_bp.route('/pages', methods=['POST'])
@login_required
@admin_required
def create_page():
    data = _json()
    form = PageForm()
    if not form.validate_on_submit():
        return validation_error(form)

    page = Page()
    populate_from_json(form, page, data, exclude=('slug',))
    page.generate_slug(form.slug.data)
    db.session.add(page)
    db.session.commit()
    return jsonify(page.to_dict()), 201


@admin_bp.route('/pages/<int:page_id>', methods=['PUT'])
@login_required
@admin_required
def update_page(page_id):
    page = Page.query.get_or_404(page_id)
    data = _json()
    form = PageForm(obj=page)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, page, data, exclude=('slug',))
    if data.get('slug'):
        page.generate_slug(data['slug'])
    db.session.commit()
    return jsonify(page.to_dict())


@admin_bp.route('/pages/<int:page_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_page(page_id):
    page = Page.query.get_or_404(page_id)
    db.session.delete(page)
    db.session.commit()
    return jsonify({'message': 'Page deleted'})


# --- Navigation ---

@admin_bp.route('/navigation-items')
@login_required
@admin_required
def navigation_items():
    items = NavigationItem.query.order_by(NavigationItem.position).all()
    return jsonify([item.to_dict() for item in items])


@admin_bp.route('/navigation-items', methods=['POST'])
@login_required
@admin_required
def create_navigation_item():
    data = _json()
    form = NavigationItemForm()
    if not form.validate_on_submit():
        return validation_error(form)

    item = NavigationItem()
    populate_from_json(form, item, data)
    item.slug = item.slug or None
    item.url = item.url or None
    item.fill_defaults()
    db.session.add(item)
    db.session.commit()
    return jsonify(item.to_dict()), 201


@admin_bp.route('/navigation-items/<int:item_id>', methods=['PUT'])
@login_required
@admin_required
def update_navigation_item(item_id):
    item = NavigationItem.query.get_or_404(item_id)
    data = _json()
    form = NavigationItemForm(obj=item)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, item, data)
    db.session.commit()
    return jsonify(item.to_dict())


@admin_bp.route('/navigation-items/<int:item_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_navigation_item(item_id):
    item = NavigationItem.query.get_or_404(item_id)
    db.session.delete(item)
    db.session.commit()
    return jsonify({'message': 'Navigation item deleted'})


@admin_bp.route('/navigation-items/reorder', methods=['POST'])
@login_required
@admin_required
def reorder_navigation_items():
    data = _json()
    items = data.get('items')
    if not isinstance(items, list):
        return jsonify({'message': 'Items are required'}), 400

    for entry in items:
        if not isinstance(entry, dict):
            return jsonify({'message': 'Each item needs an id and a position'}), 400
        item = NavigationItem.query.get(entry['id']) if entry.get('id') else None
        if item is None:
            db.session.rollback()
            return jsonify({'message': f"Navigation item {entry.get('id')} not found"}), 404
        try:
            item.position = int(entry.get('position', 0))
        except (TypeError, ValueError):
            db.session.rollback()
            return jsonify({'message': 'Position must be a number'}), 400

    db.session.commit()
    ordered = NavigationItem.query.order_by(NavigationItem.position).all()
    return jsonify([item.to_dict() for item in ordered])


# --- Ratings and invoices ---

@admin_bp.route('/ratings')
@login_required
@admin_required
def ratings():
    ratings = OrderRating.query.order_by(OrderRating.created_at.desc()).all()
    return jsonify([r.to_dict() for r in ratings])


@admin_bp.route('/invoices')
@login_required
@admin_required
def invoices():
    query = Invoice.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    query = _search(query, Invoice.invoice_number, Invoice.customer_name)
    return _paginate(query.order_by(Invoice.invoice_date.desc()), 'invoices')


@admin_bp.route('/invoices/<int:invoice_id>/status', methods=['PATCH'])
@login_required
@admin_required
def update_invoice_status(invoice_id):
    invoice = Invoice.query.get_or_404(invoice_id)
    data = _json()
    try:
        invoice.set_status(data.get('status'))
    except ValueError as e:
        return jsonify({'message': str(e)}), 400
    db.session.commit()
    return jsonify(invoice.to_dict())
