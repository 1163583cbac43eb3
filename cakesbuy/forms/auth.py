"""Authentication forms."""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, Length, EqualTo, ValidationError, Optional
from cakesbuy.models import User
from .validators import as_text, phone_number


class LoginForm(FlaskForm):
    """Login form."""
    phone = StringField('Phone', filters=[as_text], validators=[
        DataRequired(message='Phone number is required'),
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])


class RegistrationForm(FlaskForm):
    """Customer registration form."""
    name = StringField('Full Name', validators=[
        Optional(),
        Length(min=2, max=100, message='Name must be between 2 and 100 characters')
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])
    phone = StringField('Phone Number', filters=[as_text], validators=[
        DataRequired(message='Phone number is required'),
        phone_number
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        Length(min=6, message='Password must be at least 6 characters')
    ])
    confirm_password = PasswordField('Confirm Password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('password', message='Passwords must match')
    ])

    def validate_email(self, field):
        """Check if email already exists."""
        if User.query.filter_by(email=field.data.strip().lower()).first():
            raise ValidationError('This email is already registered.')

    def validate_phone(self, field):
        """Check if phone already exists."""
        if User.query.filter_by(phone=field.data.strip()).first():
            raise ValidationError('This phone number is already registered.')


class OtpRegistrationForm(RegistrationForm):
    """Registration that must be confirmed with an OTP sent to the phone."""
    otp = StringField('OTP', filters=[as_text], validators=[
        DataRequired(message='OTP is required'),
        Length(min=6, max=6, message='OTP must be 6 digits')
    ])


class SendOtpForm(FlaskForm):
    phone = StringField('Phone Number', filters=[as_text], validators=[
        DataRequired(message='Phone number is required'),
        phone_number
    ])


class ResetPasswordForm(FlaskForm):
    """Set a new password using an OTP."""
    phone = StringField('Phone Number', filters=[as_text], validators=[
        DataRequired(message='Phone number is required'),
        phone_number
    ])
    otp = StringField('OTP', filters=[as_text], validators=[
        DataRequired(message='OTP is required'),
        Length(min=6, max=6, message='OTP must be 6 digits')
    ])
    new_password = PasswordField('New Password', validators=[
        DataRequired(message='Password is required'),
        Length(min=6, message='Password must be at least 6 characters')
    ])
    confirm_password = PasswordField('Confirm Password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('new_password', message='Passwords must match')
    ])
