"""Customer account routes."""

from datetime import datetime, timedelta
from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error, populate_from_json
from cakesbuy.forms.account import ProfileForm, AddressForm, ReminderForm
from cakesbuy.models import User, Address, EventReminder, Notification
from cakesbuy.utils.decorators import customer_required
from cakesbuy.utils.helpers import next_occurrence, json_body

customer_bp = Blueprint('customer', __name__)


# --- Profile ---

@customer_bp.route('/auth/profile')
@login_required
@customer_required
def profile():
    return jsonify(current_user.to_dict())


@customer_bp.route('/auth/profile', methods=['PUT'])
@login_required
@customer_required
def update_profile():
    """Update name, email and special dates."""
    data = json_body()
    form = ProfileForm(obj=current_user)
    if not form.validate_on_submit():
        return validation_error(form)

    if 'email' in data and form.email.data:
        email = form.email.data.strip().lower()
        taken = User.query.filter(User.email == email, User.id != current_user.id).first()
        if taken:
            return jsonify({'message': 'This email is already registered.'}), 400
        form.email.data = email

    populate_from_json(form, current_user, data)
    db.session.commit()
    return jsonify({'message': 'Profile updated successfully', 'user': current_user.to_dict()})


# --- Addresses ---

@customer_bp.route('/addresses')
@login_required
@customer_required
def addresses():
    """Saved delivery addresses, default first."""
    user_addresses = current_user.addresses.order_by(
        Address.is_default.desc(), Address.created_at.desc()
    ).all()
    return jsonify([a.to_dict() for a in user_addresses])


@customer_bp.route('/addresses', methods=['POST'])
@login_required
@customer_required
def add_address():
    """Add new delivery address."""
    data = json_body()
    form = AddressForm()
    if not form.validate_on_submit():
        return validation_error(form)

    # If this is the first address, make it default
    is_first = current_user.addresses.count() == 0

    address = Address(user_id=current_user.id)
    populate_from_json(form, address, data, exclude=('is_default',))
    db.session.add(address)
    db.session.flush()

    if is_first or form.is_default.data:
        address.make_default()

    db.session.commit()
    return jsonify(address.to_dict()), 201


@customer_bp.route('/addresses/<int:address_id>', methods=['PUT'])
@login_required
@customer_required
def update_address(address_id):
    address = Address.query.filter_by(id=address_id, user_id=current_user.id).first()
    if not address:
        return jsonify({'message': 'Address not found'}), 404

    data = json_body()
    form = AddressForm(obj=address)
    if not form.validate_on_submit():
        return validation_error(form)

    populate_from_json(form, address, data, exclude=('is_default',))
    if data.get('is_default'):
        address.make_default()

    db.session.commit()
    return jsonify(address.to_dict())


@customer_bp.route('/addresses/<int:address_id>', methods=['DELETE'])
@login_required
@customer_required
def delete_address(address_id):
    address = Address.query.filter_by(id=address_id, user_id=current_user.id).first()
    if not address:
        return jsonify({'message': 'Address not found'}), 404

    was_default = address.is_default
    db.session.delete(address)
    db.session.flush()

    # Promote the most recent remaining address
    if was_default:
        replacement = current_user.addresses.order_by(Address.created_at.desc()).first()
        if replacement:
            replacement.make_default()

    db.session.commit()
    return jsonify({'message': 'Address deleted'})


@customer_bp.route('/addresses/<int:address_id>/default', methods=['PATCH'])
@login_required
@customer_required
def set_default_address(address_id):
    address = Address.query.filter_by(id=address_id, user_id=current_user.id).first()
    if not address:
        return jsonify({'message': 'Address not found'}), 404
    address.make_default()
    db.session.commit()
    return jsonify(address.to_dict())


# --- Occasion reminders ---

@customer_bp.route('/reminders')
@login_required
@customer_required
def reminders():
    user_reminders = current_user.reminders.order_by(EventReminder.reminder_date).all()
    return jsonify([r.to_dict() for r in user_reminders])


@customer_bp.route('/reminders', methods=['POST'])
@login_required
@customer_required
def add_reminder():
    """Save an occasion and schedule its reminder ahead of the next occurrence."""
    form = ReminderForm()
    if not form.validate_on_submit():
        return validation_error(form)

    try:
        event_day = next_occurrence(form.event_date.data)
    except ValueError:
        form.event_date.errors.append('Invalid date')
        return validation_error(form)

    days_before = form.days_before.data if form.days_before.data is not None else 7
    reminder_day = max(event_day - timedelta(days=days_before), datetime.utcnow().date())

    reminder = EventReminder(
        user_id=current_user.id,
        event_type=form.event_type.data,
        event_date=form.event_date.data,
        relationship_type=form.relationship_type.data or 'self',
        title=form.title.data,
        reminder_date=datetime.combine(reminder_day, datetime.min.time())
    )
    db.session.add(reminder)
    db.session.commit()
    return jsonify(reminder.to_dict()), 201


@customer_bp.route('/reminders/<int:reminder_id>', methods=['DELETE'])
@login_required
@customer_required
def delete_reminder(reminder_id):
    reminder = EventReminder.query.filter_by(id=reminder_id, user_id=current_user.id).first()
    if not reminder:
        return jsonify({'message': 'Reminder not found'}), 404
    db.session.delete(reminder)
    db.session.commit()
    return jsonify({'message': 'Reminder deleted'})


# --- Notifications ---

@customer_bp.route('/notifications')
@login_required
@customer_required
def get_notifications():
    """Get user notifications."""
    notifications = Notification.query.filter_by(
        user_id=current_user.id
    ).order_by(Notification.created_at.desc()).limit(20).all()

    unread_count = Notification.query.filter_by(
        user_id=current_user.id,
        is_read=False
    ).count()

    return jsonify({
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': unread_count
    })


@customer_bp.route('/notifications/mark-read', methods=['POST'])
@login_required
@customer_required
def mark_notifications_read():
    """Mark notifications as read."""
    data = json_body()
    notification_ids = data.get('ids', [])

    if notification_ids:
        Notification.query.filter(
            Notification.id.in_(notification_ids),
            Notification.user_id == current_user.id
        ).update({'is_read': True}, synchronize_session=False)
    else:
        # Mark all as read
        Notification.query.filter_by(
            user_id=current_user.id,
            is_read=False
        ).update({'is_read': True})

    db.session.commit()
    return jsonify({'success': True})
