"""Partner bakery routes."""

import logging
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error
from cakesbuy.forms.auth import LoginForm
from cakesbuy.forms.partners import VendorRegistrationForm
from cakesbuy.models import Vendor, Order
from cakesbuy.services.alerts import send_admin_alert
from cakesbuy.services.notifications import notify_status_change
from cakesbuy.utils.decorators import vendor_required
from cakesbuy.utils.helpers import json_body
from cakesbuy.utils.tokens import create_token

vendor_bp = Blueprint('vendor', __name__)
logger = logging.getLogger(__name__)

VENDOR_STATUSES = ('confirmed', 'preparing', 'out_for_delivery', 'delivered')


@vendor_bp.route('/register', methods=['POST'])
def register():
    """Register a bakery. Accounts stay inactive until an admin approves them."""
    form = VendorRegistrationForm()
    if not form.validate_on_submit():
        return validation_error(form)

    vendor = Vendor(
        name=form.name.data.strip(),
        email=form.email.data.strip().lower(),
        phone=form.phone.data.strip(),
        business_name=form.business_name.data.strip(),
        business_address=form.business_address.data.strip(),
        business_license=form.business_license.data or None,
        gst_number=(form.gst_number.data or '').upper() or None,
        pan_number=(form.pan_number.data or '').upper() or None,
        commission=form.commission.data or 0.0,
        is_active=False,
        is_verified=False
    )
    vendor.set_password(form.password.data)
    db.session.add(vendor)
    db.session.commit()
    logger.info('Vendor registered: %s', vendor.business_name)

    send_admin_alert('New vendor registration',
                     f'{vendor.business_name} ({vendor.phone}) is waiting for approval.')
    return jsonify({
        'message': 'Registration submitted. You can log in once an admin approves your account.',
        'vendor': vendor.to_dict()
    }), 201


@vendor_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return validation_error(form)

    vendor = Vendor.query.filter_by(phone=form.phone.data.strip()).first()
    if not vendor or not vendor.check_password(form.password.data):
        return jsonify({'message': 'Invalid phone number or password'}), 401
    if not vendor.is_active:
        return jsonify({'message': 'Your account is pending approval or has been deactivated'}), 401

    return jsonify({
        'message': 'Login successful',
        'vendor': vendor.to_dict(),
        'token': create_token(vendor)
    })


@vendor_bp.route('/me')
@login_required
@vendor_required
def me():
    return jsonify(current_user.to_dict())


@vendor_bp.route('/orders')
@login_required
@vendor_required
def orders():
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 20, type=int)
    query = Order.query.filter_by(vendor_id=current_user.id)
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    pagination = query.order_by(Order.vendor_assigned_at.desc()).paginate(
        page=page, per_page=max(1, min(limit, 100)), error_out=False
    )
    return jsonify({
        'orders': [o.to_dict() for o in pagination.items],
        'total': pagination.total,
        'pages': pagination.pages,
        'current_page': page
    })


@vendor_bp.route('/orders/<int:order_id>/status', methods=['PATCH'])
@login_required
@vendor_required
def update_order_status(order_id):
    order = Order.query.filter_by(id=order_id, vendor_id=current_user.id).first()
    if not order:
        return jsonify({'message': 'Order not found'}), 404

    data = json_body()
    status = data.get('status')
    if status not in VENDOR_STATUSES:
        return jsonify({'message': 'Invalid status'}), 400

    ok, message = order.update_status(status, data.get('notes') or f'Updated by {current_user.business_name}')
    if not ok:
        return jsonify({'message': message}), 400

    db.session.commit()
    logger.info('Order %s set to %s by vendor %s', order.order_number, status, current_user.id)
    notify_status_change(order)
    return jsonify({'message': message, 'order': order.to_dict()})
