"""Delivery partner and vendor forms."""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SelectField, BooleanField, FloatField
from wtforms.validators import DataRequired, Email, Length, EqualTo, ValidationError, Optional
from cakesbuy.models import DeliveryBoy, Vendor
from .validators import as_text, phone_number, pincode, gst_number, pan_number


class DeliveryBoyForm(FlaskForm):
    """Delivery boy account, used for self-registration and by admins."""
    name = StringField('Full Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    phone = StringField('Phone Number', filters=[as_text], validators=[
        DataRequired(message='Phone number is required'),
        phone_number
    ])
    email = StringField('Email', validators=[Optional(), Email(message='Please enter a valid email address')])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        Length(min=6, message='Password must be at least 6 characters')
    ])
    vehicle_type = SelectField('Vehicle', choices=[
        ('bike', 'Bike'), ('scooter', 'Scooter'), ('car', 'Car'), ('bicycle', 'Bicycle')
    ], default='bike')
    vehicle_number = StringField('Vehicle Number', validators=[Optional(), Length(max=20)])
    address = StringField('Address', validators=[Optional(), Length(max=500)])
    pincode = StringField('Pincode', filters=[as_text], validators=[Optional(), pincode])
    is_active = BooleanField('Active', default=True)

    def __init__(self, *args, instance=None, **kwargs):
        super().__init__(*args, obj=instance, **kwargs)
        self.instance = instance

    def validate_phone(self, field):
        existing = DeliveryBoy.query.filter_by(phone=field.data.strip()).first()
        if existing and (self.instance is None or existing.id != self.instance.id):
            raise ValidationError('A delivery partner with this phone number already exists.')


class DeliveryBoyUpdateForm(DeliveryBoyForm):
    password = PasswordField('Password', validators=[Optional(), Length(min=6)])


class VendorRegistrationForm(FlaskForm):
    """Partner bakery registration."""
    name = StringField('Owner Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
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
        Optional(),
        EqualTo('password', message='Passwords must match')
    ])
    business_name = StringField('Business Name', validators=[
        DataRequired(message='Business name is required'),
        Length(max=150)
    ])
    business_address = StringField('Business Address', validators=[
        DataRequired(message='Business address is required'),
        Length(max=500)
    ])
    business_license = StringField('License Number', validators=[Optional(), Length(max=100)])
    gst_number = StringField('GST Number', validators=[Optional(), gst_number])
    pan_number = StringField('PAN Number', validators=[Optional(), pan_number])
    commission = FloatField('Commission %', validators=[Optional()])

    def validate_email(self, field):
        if Vendor.query.filter_by(email=field.data.strip().lower()).first():
            raise ValidationError('A vendor with this email already exists.')

    def validate_phone(self, field):
        if Vendor.query.filter_by(phone=field.data.strip()).first():
            raise ValidationError('A vendor with this phone number already exists.')
