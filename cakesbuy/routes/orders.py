"""Order routes: checkout, tracking, cancellation, invoices and ratings."""

import logging
from datetime import datetime
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error, populate_from_json
from cakesbuy.forms.account import OrderRatingForm
from cakesbuy.models import (Order, OrderItem, OrderStatusHistory, Cake, Addon, DeliveryArea,
                             PromoCode, Invoice, OrderRating, AdminConfig, Notification)
from cakesbuy.models.order import PAYMENT_METHODS
from cakesbuy.services import emails
from cakesbuy.services.invoices import create_invoice
from cakesbuy.services.notifications import notify_order_placed
from cakesbuy.utils.decorators import admin_required, customer_required
from cakesbuy.utils.helpers import money, json_body

orders_bp = Blueprint('orders', __name__)
logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ('name', 'phone', 'email', 'address', 'pincode', 'city', 'landmark')


class CheckoutError(Exception):
    """Order payload that cannot be priced or placed."""


def _principal_user():
    """The logged-in customer, or None for guests and staff tokens."""
    if current_user.is_authenticated and getattr(current_user, 'principal_type', None) == 'user':
        return current_user._get_current_object()
    return None


def _can_view(order):
    user = _principal_user()
    return user is not None and (order.user_id == user.id or user.is_admin())


def _price_items(items_data):
    """Build order items from the cart payload using catalogue prices."""
    if not isinstance(items_data, list) or not items_data:
        raise CheckoutError('Order must contain at least one item')

    items = []
    for entry in items_data:
        if not isinstance(entry, dict):
            raise CheckoutError('Invalid order item')
        cake = Cake.query.get(entry['cake_id']) if entry.get('cake_id') else None
        if not cake or not cake.is_available:
            raise CheckoutError('Cake is not available')

        try:
            quantity = int(entry.get('quantity', 1))
        except (TypeError, ValueError):
            raise CheckoutError('Invalid quantity')
        if quantity < 1:
            raise CheckoutError('Quantity must be at least 1')

        weight = entry.get('weight')
        unit_price = cake.price_for(weight)

        addons = []
        addons_total = 0.0
        for addon_entry in entry.get('addons') or []:
            if not isinstance(addon_entry, dict):
                raise CheckoutError('Invalid addon')
            addon = Addon.query.get(addon_entry['id']) if addon_entry.get('id') else None
            if not addon or not addon.is_available:
                raise CheckoutError('Addon is not available')
            addon_quantity = max(int(addon_entry.get('quantity', 1) or 1), 1)
            addons.append({
                'id': addon.id,
                'name': addon.name,
                'price': money(addon.price),
                'quantity': addon_quantity,
            })
            addons_total += addon.price * addon_quantity

        items.append(OrderItem(
            cake_id=cake.id,
            name=cake.name,
            weight=weight,
            flavor=entry.get('flavor'),
            quantity=quantity,
            unit_price=unit_price,
            addons=addons,
            custom_message=entry.get('custom_message'),
            photo_customization=entry.get('photo_customization'),
            subtotal=money((unit_price + addons_total) * quantity)
        ))
    return items


def _delivery_address(data, user):
    address = data.get('delivery_address')
    if not isinstance(address, dict):
        raise CheckoutError('Delivery address is required')
    snapshot = {field: address.get(field) for field in ADDRESS_FIELDS}
    if user is not None:
        snapshot['email'] = snapshot['email'] or user.email
        snapshot['phone'] = snapshot['phone'] or user.phone
        snapshot['name'] = snapshot['name'] or user.name
    for field in ('name', 'phone', 'address', 'pincode'):
        if not snapshot.get(field):
            raise CheckoutError(f'Delivery {field} is required')
    snapshot['pincode'] = str(snapshot['pincode']).strip()
    return snapshot


@orders_bp.route('/orders', methods=['POST'])
def create_order():
    """Place an order. Prices, fees and discounts are computed here."""
    data = json_body()
    user = _principal_user()

    try:
        items = _price_items(data.get('items'))
        address = _delivery_address(data, user)

        payment_method = data.get('payment_method', 'cod')
        if payment_method not in PAYMENT_METHODS:
            raise CheckoutError('Invalid payment method')

        subtotal = money(sum(item.subtotal for item in items))

        area = DeliveryArea.query.filter_by(pincode=address['pincode'], is_active=True).first()
        if not area:
            raise CheckoutError('Delivery is not available for this pincode')
        delivery_fee = area.fee_for(subtotal)

        discount = 0.0
        promo = None
        if data.get('promo_code'):
            promo = PromoCode.find(data['promo_code'])
            if not promo:
                raise CheckoutError('Invalid promo code')
            is_valid, message = promo.is_valid(subtotal)
            if not is_valid:
                raise CheckoutError(message)
            discount = promo.calculate_discount(subtotal)

        total = money(max(subtotal + delivery_fee - discount, 0))

        wallet_requested = float(data.get('wallet_amount') or 0)
        use_wallet = payment_method in ('wallet', 'partial_wallet') or wallet_requested > 0
        if use_wallet and user is None:
            raise CheckoutError('Login required to pay with wallet')
    except (TypeError, ValueError):
        return jsonify({'message': 'Invalid order data'}), 400
    except CheckoutError as e:
        return jsonify({'message': str(e)}), 400

    order = Order(
        order_number=Order.generate_order_number(),
        user_id=user.id if user else None,
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        discount=discount,
        total=total,
        payment_method=payment_method,
        delivery_address=address,
        delivery_date=data.get('delivery_date'),
        delivery_time=data.get('delivery_time'),
        delivery_occasion=data.get('delivery_occasion'),
        relation=data.get('relation'),
        sender_name=data.get('sender_name'),
        special_instructions=data.get('special_instructions'),
        promo_code=promo.code if promo else None
    )
    db.session.add(order)
    db.session.flush()

    for item in items:
        item.order_id = order.id
        db.session.add(item)

    if use_wallet and total > 0:
        wallet_amount = money(min(wallet_requested or total, total))
        try:
            user.debit_wallet(wallet_amount, f'Payment for order {order.order_number}', order_id=order.id)
        except ValueError as e:
            db.session.rollback()
            return jsonify({'message': str(e)}), 400
        order.wallet_amount_used = wallet_amount
        if wallet_amount >= total:
            order.payment_status = 'paid'
            order.payment_method = 'wallet'
        else:
            order.payment_method = 'partial_wallet' if payment_method == 'wallet' else payment_method

    if promo:
        promo.used_count = (promo.used_count or 0) + 1

    order.add_status_history('pending', 'Order placed')
    if user is not None:
        rupees_per_point = AdminConfig.get_value(
            'loyalty_rupees_per_point', current_app.config['LOYALTY_RUPEES_PER_POINT']
        )
        user.record_purchase(order, rupees_per_point)
        db.session.add(Notification.create_order_notification(user.id, order.order_number, 'pending'))

    create_invoice(order)
    db.session.commit()
    logger.info('Order %s placed: total %.2f via %s', order.order_number, order.total, order.payment_method)

    notify_order_placed(order)

    return jsonify(order.to_dict()), 201


@orders_bp.route('/auth/orders')
@login_required
@customer_required
def my_orders():
    """The current user's orders, newest first."""
    orders = Order.query.filter_by(
        user_id=current_user.id
    ).order_by(Order.created_at.desc()).all()
    return jsonify([o.to_dict() for o in orders])


@orders_bp.route('/orders/<order_number>')
def order_detail(order_number):
    """Order lookup by number, also used for guest order pages."""
    order = Order.query.filter_by(order_number=order_number).first()
    if not order:
        return jsonify({'message': 'Order not found'}), 404
    return jsonify(order.to_dict())


@orders_bp.route('/orders/<order_number>/tracking')
def order_tracking(order_number):
    """Status timeline for an order."""
    order = Order.query.filter_by(order_number=order_number).first()
    if not order:
        return jsonify({'message': 'Order not found'}), 404

    status_history = order.status_history.order_by(
        OrderStatusHistory.created_at.asc(), OrderStatusHistory.id.asc()
    ).all()

    delivery_boy = None
    if order.delivery_boy:
        delivery_boy = {'name': order.delivery_boy.name, 'phone': order.delivery_boy.phone}

    return jsonify({
        'order_number': order.order_number,
        'status': order.status,
        'payment_status': order.payment_status,
        'delivery_date': order.delivery_date,
        'delivery_time': order.delivery_time,
        'created_at': order.created_at.isoformat(),
        'picked_up_at': order.picked_up_at.isoformat() if order.picked_up_at else None,
        'delivered_at': order.delivered_at.isoformat() if order.delivered_at else None,
        'status_history': [h.to_dict() for h in status_history],
        'delivery_boy': delivery_boy
    })


@orders_bp.route('/orders/<order_number>/cancel', methods=['POST'])
@login_required
@customer_required
def cancel_order(order_number):
    """Cancel an order."""
    order = Order.query.filter_by(
        order_number=order_number,
        user_id=current_user.id
    ).first()
    if not order:
        return jsonify({'message': 'Order not found'}), 404

    data = json_body()
    reason = data.get('reason') or 'Customer requested cancellation'

    ok, message = order.cancel(reason)
    if not ok:
        return jsonify({'message': message}), 400

    db.session.commit()
    logger.info('Order %s cancelled by customer', order.order_number)
    return jsonify({'message': 'Order cancelled successfully', 'order': order.to_dict()})


# --- Invoices ---

@orders_bp.route('/orders/<int:order_id>/invoice', methods=['POST'])
@login_required
def generate_invoice(order_id):
    """Create the invoice for an order if it does not have one yet."""
    order = Order.query.get_or_404(order_id)
    if not _can_view(order):
        return jsonify({'message': 'Access denied'}), 403

    invoice = create_invoice(order)
    db.session.commit()
    return jsonify(invoice.to_dict()), 201


@orders_bp.route('/orders/<int:order_id>/invoice')
@login_required
def order_invoice(order_id):
    order = Order.query.get_or_404(order_id)
    if not _can_view(order):
        return jsonify({'message': 'Access denied'}), 403
    if not order.invoice:
        return jsonify({'message': 'Invoice not found'}), 404
    return jsonify(order.invoice.to_dict())


@orders_bp.route('/invoices/<invoice_number>')
def invoice_detail(invoice_number):
    invoice = Invoice.query.filter_by(invoice_number=invoice_number).first()
    if not invoice:
        return jsonify({'message': 'Invoice not found'}), 404
    return jsonify(invoice.to_dict())


@orders_bp.route('/auth/invoices')
@login_required
@customer_required
def my_invoices():
    invoices = Invoice.query.filter_by(
        user_id=current_user.id
    ).order_by(Invoice.invoice_date.desc()).all()
    return jsonify([i.to_dict() for i in invoices])


# --- Ratings ---

@orders_bp.route('/orders/<int:order_id>/rating')
def order_rating(order_id):
    """Order summary for the rating page, with any existing rating."""
    order = Order.query.get_or_404(order_id)
    return jsonify({
        'order': {
            'id': order.id,
            'order_number': order.order_number,
            'status': order.status,
            'total': money(order.total),
            'delivered_at': order.delivered_at.isoformat() if order.delivered_at else None,
            'items': [{'name': i.name, 'weight': i.weight, 'quantity': i.quantity} for i in order.items],
            'delivery_boy': order.delivery_boy.name if order.delivery_boy else None,
        },
        'rating': order.rating.to_dict() if order.rating else None
    })


@orders_bp.route('/orders/<int:order_id>/rating', methods=['POST'])
def submit_order_rating(order_id):
    """Create or update the feedback for a delivered order."""
    order = Order.query.get_or_404(order_id)
    if order.status != 'delivered':
        return jsonify({'message': 'Only delivered orders can be rated'}), 400

    data = json_body()
    form = OrderRatingForm(obj=order.rating)
    if not form.validate_on_submit():
        return validation_error(form)

    rating = order.rating
    created = rating is None
    if created:
        rating = OrderRating(order=order, user_id=order.user_id)
        db.session.add(rating)
    populate_from_json(form, rating, data)
    db.session.commit()

    return jsonify({
        'message': 'Thank you for your feedback!',
        'rating': rating.to_dict()
    }), 201 if created else 200


@orders_bp.route('/orders/<int:order_id>/send-rating-email', methods=['POST'])
@login_required
@admin_required
def send_rating_email(order_id):
    order = Order.query.get_or_404(order_id)
    if order.status != 'delivered':
        return jsonify({'message': 'Rating requests can only be sent for delivered orders'}), 400
    if not order.customer_email:
        return jsonify({'message': 'No customer email found for this order'}), 400

    if not emails.send_rating_request(order):
        return jsonify({'message': 'Failed to send rating email'}), 502

    if order.rating:
        order.rating.feedback_email_sent = True
        order.rating.feedback_email_sent_at = datetime.utcnow()
        db.session.commit()
    return jsonify({'message': 'Rating email sent successfully'})
