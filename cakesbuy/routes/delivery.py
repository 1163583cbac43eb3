"""Delivery partner routes."""

import logging
from datetime import datetime
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import func
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error, populate_from_json
from cakesbuy.forms.auth import LoginForm
from cakesbuy.forms.partners import DeliveryBoyForm
from cakesbuy.models import DeliveryBoy, Order, Notification
from cakesbuy.services.notifications import notify_status_change
from cakesbuy.utils.decorators import delivery_required
from cakesbuy.utils.helpers import money, json_body
from cakesbuy.utils.tokens import create_token

delivery_bp = Blueprint('delivery', __name__)
logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ['confirmed', 'preparing', 'out_for_delivery']
DELIVERY_STATUSES = ('out_for_delivery', 'delivered')


def _assigned_order(order_id):
    """Order by id, if it belongs to the current delivery boy."""
    order = Order.query.get_or_404(order_id)
    if order.delivery_boy_id != current_user.id:
        return None
    return order


@delivery_bp.route('/register', methods=['POST'])
def register():
    """Delivery partner self-registration."""
    data = json_body()
    form = DeliveryBoyForm()
    if not form.validate_on_submit():
        return validation_error(form)

    delivery_boy = DeliveryBoy()
    populate_from_json(form, delivery_boy, data, exclude=('is_active', 'password'))
    delivery_boy.phone = form.phone.data.strip()
    delivery_boy.set_password(form.password.data)
    db.session.add(delivery_boy)
    db.session.commit()
    logger.info('Delivery partner registered: %s', delivery_boy.phone)

    return jsonify({
        'message': 'Registration successful',
        'delivery_boy': delivery_boy.to_dict(),
        'token': create_token(delivery_boy)
    }), 201


@delivery_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return validation_error(form)

    delivery_boy = DeliveryBoy.query.filter_by(phone=form.phone.data.strip()).first()
    if not delivery_boy or not delivery_boy.check_password(form.password.data):
        return jsonify({'message': 'Invalid phone number or password'}), 401
    if not delivery_boy.is_active:
        return jsonify({'message': 'Your account has been deactivated'}), 403

    return jsonify({
        'message': 'Login successful',
        'delivery_boy': delivery_boy.to_dict(),
        'token': create_token(delivery_boy)
    })


@delivery_bp.route('/profile')
@login_required
@delivery_required
def profile():
    return jsonify(current_user.to_dict())


@delivery_bp.route('/orders')
@login_required
@delivery_required
def orders():
    """Orders assigned to the delivery boy, active ones by default."""
    query = Order.query.filter_by(delivery_boy_id=current_user.id)
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    else:
        query = query.filter(Order.status.in_(ACTIVE_STATUSES))
    return jsonify([o.to_dict() for o in query.order_by(Order.assigned_at.desc()).all()])


@delivery_bp.route('/stats')
@login_required
@delivery_required
def stats():
    today = datetime.utcnow().date()
    assigned = Order.query.filter_by(delivery_boy_id=current_user.id)

    return jsonify({
        'total_deliveries': current_user.total_deliveries or 0,
        'total_earnings': money(current_user.total_earnings),
        'rating': current_user.rating,
        'active_orders': assigned.filter(Order.status.in_(ACTIVE_STATUSES)).count(),
        'today_deliveries': assigned.filter(
            Order.status == 'delivered',
            func.date(Order.delivered_at) == today
        ).count(),
    })


@delivery_bp.route('/order-history')
@login_required
@delivery_required
def order_history():
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 20, type=int)
    pagination = Order.query.filter(
        Order.delivery_boy_id == current_user.id,
        Order.status.in_(['delivered', 'cancelled'])
    ).order_by(Order.updated_at.desc()).paginate(page=page, per_page=max(1, min(limit, 100)),
                                                 error_out=False)
    return jsonify({
        'orders': [o.to_dict() for o in pagination.items],
        'total': pagination.total,
        'pages': pagination.pages,
        'current_page': page
    })


@delivery_bp.route('/orders/<int:order_id>/status', methods=['PATCH'])
@login_required
@delivery_required
def update_order_status(order_id):
    """Mark an assigned order picked up or delivered."""
    order = _assigned_order(order_id)
    if order is None:
        return jsonify({'message': 'This order is not assigned to you'}), 403

    data = json_body()
    status = data.get('status')
    if status not in DELIVERY_STATUSES:
        return jsonify({'message': 'Status must be out_for_delivery or delivered'}), 400

    ok, message = order.update_status(status, data.get('notes') or f'Updated by {current_user.name}')
    if not ok:
        return jsonify({'message': message}), 400

    db.session.commit()
    logger.info('Order %s set to %s by delivery boy %s', order.order_number, status, current_user.id)
    notify_status_change(order)
    return jsonify({'message': message, 'order': order.to_dict()})


@delivery_bp.route('/orders/<int:order_id>/reject', methods=['POST'])
@login_required
@delivery_required
def reject_order(order_id):
    """Hand an assigned order back to the admins."""
    order = _assigned_order(order_id)
    if order is None:
        return jsonify({'message': 'This order is not assigned to you'}), 403
    if order.status in ('delivered', 'cancelled'):
        return jsonify({'message': f'Cannot reject a {order.status} order'}), 400

    data = json_body()
    reason = (data.get('reason') or 'No reason given').strip()
    note = f'[REJECTED by {current_user.name}: {reason}]'
    order.special_instructions = f'{order.special_instructions} {note}' if order.special_instructions else note
    order.delivery_boy_id = None
    order.assigned_at = None
    db.session.commit()
    logger.info('Order %s rejected by delivery boy %s', order.order_number, current_user.id)

    return jsonify({'message': 'Order rejected', 'order': order.to_dict()})


@delivery_bp.route('/notifications')
@login_required
@delivery_required
def notifications():
    items = Notification.query.filter_by(
        delivery_boy_id=current_user.id
    ).order_by(Notification.created_at.desc()).limit(20).all()

    unread_count = Notification.query.filter_by(
        delivery_boy_id=current_user.id,
        is_read=False
    ).count()

    return jsonify({
        'notifications': [n.to_dict() for n in items],
        'unread_count': unread_count
    })


@delivery_bp.route('/notifications/mark-read', methods=['POST'])
@login_required
@delivery_required
def mark_notifications_read():
    data = json_body()
    query = Notification.query.filter_by(delivery_boy_id=current_user.id, is_read=False)
    ids = data.get('ids')
    if ids:
        query = query.filter(Notification.id.in_(ids))
    query.update({'is_read': True}, synchronize_session=False)
    db.session.commit()
    return jsonify({'success': True})
