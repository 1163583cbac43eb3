"""Back-office forms for catalogue, promotions and settings."""

from flask_wtf import FlaskForm
from wtforms import (StringField, TextAreaField, FloatField, IntegerField, BooleanField,
                     SelectField, PasswordField)
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional, ValidationError
from .validators import as_text, pincode, phone_number


class CategoryForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    slug = StringField('Slug', validators=[Optional(), Length(max=120)])
    description = TextAreaField('Description', validators=[Optional()])
    image = StringField('Image', validators=[Optional(), Length(max=255)])
    parent_id = IntegerField('Parent', validators=[Optional()])
    is_active = BooleanField('Active', default=True)
    show_on_homepage = BooleanField('Show on homepage')


class CakeForm(FlaskForm):
    """Cake form. List and JSON attributes are read from the payload directly."""
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=150)])
    slug = StringField('Slug', validators=[Optional(), Length(max=170)])
    description = TextAreaField('Description', validators=[Optional()])
    category_id = IntegerField('Category', validators=[Optional()])
    base_price = FloatField('Base Price', validators=[
        DataRequired(message='Price is required'),
        NumberRange(min=0.01, message='Price must be greater than 0')
    ])
    is_eggless = BooleanField('Eggless')
    is_customizable = BooleanField('Customizable')
    is_available = BooleanField('Available', default=True)
    is_bestseller = BooleanField('Bestseller')
    is_photo_cake = BooleanField('Photo cake')
    photo_preview_shape = SelectField('Photo shape', choices=[
        ('circle', 'Circle'), ('heart', 'Heart'), ('square', 'Square')
    ], default='circle')


class AddonForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    description = TextAreaField('Description', validators=[Optional()])
    price = FloatField('Price', validators=[
        DataRequired(message='Price is required'),
        NumberRange(min=0.01, message='Price must be greater than 0')
    ])
    category = SelectField('Category', choices=[
        ('balloons', 'Balloons'), ('candles', 'Candles'), ('cards', 'Cards'), ('flowers', 'Flowers')
    ])
    is_available = BooleanField('Available', default=True)


class DeliveryAreaForm(FlaskForm):
    name = StringField('Area', validators=[DataRequired(message='Name is required'), Length(max=100)])
    pincode = StringField('Pincode', filters=[as_text], validators=[DataRequired(message='Pincode is required'), pincode])
    delivery_fee = FloatField('Delivery Fee', default=0.0, validators=[Optional(), NumberRange(min=0)])
    free_delivery_threshold = FloatField('Free delivery above', default=500.0,
                                         validators=[Optional(), NumberRange(min=0)])
    same_day_available = BooleanField('Same day', default=True)
    midnight_available = BooleanField('Midnight')
    is_active = BooleanField('Active', default=True)


class PromoCodeForm(FlaskForm):
    """Promo code form. Validity dates are parsed from ISO strings in the route."""
    code = StringField('Code', validators=[
        DataRequired(message='Code is required'),
        Length(min=3, max=50)
    ])
    description = StringField('Description', validators=[Optional(), Length(max=255)])
    discount_type = SelectField('Discount Type', choices=[
        ('percentage', 'Percentage'), ('fixed', 'Fixed Amount')
    ])
    discount_value = FloatField('Discount Value', validators=[
        DataRequired(message='Discount value is required'),
        NumberRange(min=0.01)
    ])
    min_order_value = FloatField('Minimum Order', default=0.0, validators=[Optional(), NumberRange(min=0)])
    max_discount = FloatField('Maximum Discount', validators=[Optional(), NumberRange(min=0)])
    usage_limit = IntegerField('Usage Limit', validators=[Optional(), NumberRange(min=1)])
    is_active = BooleanField('Active', default=True)

    def validate_discount_value(self, field):
        if self.discount_type.data == 'percentage' and field.data and field.data > 100:
            raise ValidationError('Percentage discount cannot exceed 100')


class PageForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(message='Title is required'), Length(max=200)])
    slug = StringField('Slug', validators=[Optional(), Length(max=220)])
    content = TextAreaField('Content', validators=[DataRequired(message='Content is required')])
    meta_title = StringField('Meta Title', validators=[Optional(), Length(max=200)])
    meta_description = StringField('Meta Description', validators=[Optional(), Length(max=500)])
    is_published = BooleanField('Published', default=True)
    show_in_menu = BooleanField('Show in menu')
    menu_order = IntegerField('Menu order', default=0, validators=[Optional()])


class NavigationItemForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    slug = StringField('Slug', validators=[Optional(), Length(max=120)])
    url = StringField('URL', validators=[Optional(), Length(max=255)])
    position = IntegerField('Position', validators=[Optional()])
    is_active = BooleanField('Active', default=True)
    is_new = BooleanField('New badge')
    category_id = IntegerField('Category', validators=[Optional()])


class WalletAdjustmentForm(FlaskForm):
    user_id = IntegerField('User', validators=[DataRequired(message='User is required')])
    amount = FloatField('Amount', validators=[
        DataRequired(message='Amount is required'),
        NumberRange(min=0.01, message='Amount must be greater than 0')
    ])
    description = StringField('Description', validators=[
        DataRequired(message='Description is required'),
        Length(max=255)
    ])


class AdminConfigForm(FlaskForm):
    key = StringField('Key', validators=[DataRequired(message='Key is required'), Length(max=100)])
    type = SelectField('Type', choices=[
        ('string', 'Text'), ('number', 'Number'), ('boolean', 'Yes/No'), ('json', 'JSON')
    ], default='string')
    description = StringField('Description', validators=[Optional(), Length(max=255)])
    category = StringField('Category', validators=[Optional(), Length(max=50)])


class UserForm(FlaskForm):
    """Admin-managed user account."""
    name = StringField('Full Name', validators=[Optional(), Length(max=100)])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])
    phone = StringField('Phone', filters=[as_text], validators=[DataRequired(message='Phone number is required'), phone_number])
    password = PasswordField('Password', validators=[Optional(), Length(min=6)])
    role = SelectField('Role', choices=[('customer', 'Customer'), ('admin', 'Admin')], default='customer')
    is_active = BooleanField('Active', default=True)


class LoyaltyRewardForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=150)])
    description = TextAreaField('Description', validators=[Optional()])
    points_cost = IntegerField('Points', validators=[
        DataRequired(message='Points cost is required'),
        NumberRange(min=1)
    ])
    reward_type = SelectField('Type', choices=[
        ('discount', 'Discount'), ('free_item', 'Free item'), ('free_delivery', 'Free delivery')
    ])
    reward_value = FloatField('Value', default=0.0, validators=[Optional(), NumberRange(min=0)])
    min_tier = SelectField('Minimum tier', choices=[
        ('Bronze', 'Bronze'), ('Silver', 'Silver'), ('Gold', 'Gold'), ('Platinum', 'Platinum')
    ], default='Bronze')
    max_redemptions = IntegerField('Max redemptions', validators=[Optional(), NumberRange(min=1)])
    validity_days = IntegerField('Valid for (days)', default=30, validators=[Optional(), NumberRange(min=1)])
    is_active = BooleanField('Active', default=True)
