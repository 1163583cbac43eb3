"""Customer authentication routes."""

import logging
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error
from cakesbuy.forms.auth import (LoginForm, RegistrationForm, OtpRegistrationForm,
                                 SendOtpForm, ResetPasswordForm)
from cakesbuy.models import User, OtpVerification, AdminConfig
from cakesbuy.services import emails, whatsapp
from cakesbuy.utils.decorators import customer_required
from cakesbuy.utils.tokens import create_token

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


def _create_customer(form):
    """Create the account, credit the welcome bonus and send greetings."""
    user = User(
        name=(form.name.data or '').strip() or None,
        email=form.email.data.strip().lower(),
        phone=form.phone.data.strip(),
        role='customer'
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.flush()

    bonus = AdminConfig.get_value('welcome_bonus', current_app.config['WELCOME_BONUS'])
    if bonus:
        user.credit_wallet(bonus, 'Welcome bonus')

    db.session.commit()
    logger.info('New customer registered: %s', user.email)

    emails.send_welcome_email(user, bonus)
    whatsapp.send_welcome_message(user, bonus)
    return user


def _auth_response(user, status=200, message='Login successful'):
    return jsonify({
        'message': message,
        'user': user.to_dict(),
        'token': create_token(user)
    }), status


@auth_bp.route('/auth/register', methods=['POST'])
def register():
    """Customer registration."""
    form = RegistrationForm()
    if not form.validate_on_submit():
        return validation_error(form)

    user = _create_customer(form)
    return _auth_response(user, 201, 'Registration successful')


@auth_bp.route('/auth/send-otp', methods=['POST'])
def send_otp():
    """Send a registration OTP to a phone number."""
    form = SendOtpForm()
    if not form.validate_on_submit():
        return validation_error(form)

    phone = form.phone.data.strip()
    otp = OtpVerification.issue(phone, current_app.config['OTP_EXPIRY_MINUTES'])
    db.session.commit()

    whatsapp.send_message(phone, f'Your CakesBuy verification code is {otp.otp}. '
                                 f'It expires in {current_app.config["OTP_EXPIRY_MINUTES"]} minutes.')

    response = {'message': 'OTP sent successfully'}
    if current_app.config['OTP_ECHO']:
        response['otp'] = otp.otp
    return jsonify(response)


@auth_bp.route('/auth/register-with-otp', methods=['POST'])
def register_with_otp():
    """Registration confirmed by the OTP sent to the phone."""
    form = OtpRegistrationForm()
    if not form.validate_on_submit():
        return validation_error(form)

    if not OtpVerification.verify(form.phone.data.strip(), form.otp.data.strip()):
        return jsonify({'message': 'Invalid or expired OTP'}), 400

    user = _create_customer(form)
    return _auth_response(user, 201, 'Registration successful')


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    """Customer login with phone and password."""
    form = LoginForm()
    if not form.validate_on_submit():
        return validation_error(form)

    user = User.query.filter_by(phone=form.phone.data.strip()).first()
    if not user or not user.check_password(form.password.data):
        return jsonify({'message': 'Invalid phone number or password'}), 401

    if not user.is_active:
        return jsonify({'message': 'Your account has been deactivated'}), 403

    return _auth_response(user)


@auth_bp.route('/auth/forgot-password', methods=['POST'])
def forgot_password():
    """Send a password reset OTP."""
    form = SendOtpForm()
    if not form.validate_on_submit():
        return validation_error(form)

    phone = form.phone.data.strip()
    if not User.query.filter_by(phone=phone).first():
        return jsonify({'message': 'No account found with this phone number'}), 404

    otp = OtpVerification.issue(phone, current_app.config['OTP_EXPIRY_MINUTES'])
    db.session.commit()
    whatsapp.send_message(phone, f'Your CakesBuy password reset code is {otp.otp}.')

    response = {'message': 'Password reset OTP sent'}
    if current_app.config['OTP_ECHO']:
        response['otp'] = otp.otp
    return jsonify(response)


@auth_bp.route('/auth/reset-password', methods=['POST'])
def reset_password():
    """Set a new password after OTP verification."""
    form = ResetPasswordForm()
    if not form.validate_on_submit():
        return validation_error(form)

    phone = form.phone.data.strip()
    user = User.query.filter_by(phone=phone).first()
    if not user:
        return jsonify({'message': 'No account found with this phone number'}), 404

    if not OtpVerification.verify(phone, form.otp.data.strip()):
        return jsonify({'message': 'Invalid or expired OTP'}), 400

    user.set_password(form.new_password.data)
    db.session.commit()
    logger.info('Password reset for user %s', user.id)
    return jsonify({'message': 'Password reset successful'})


@auth_bp.route('/auth/me')
@login_required
@customer_required
def me():
    """Current user profile."""
    return jsonify({'user': current_user.to_dict()})
