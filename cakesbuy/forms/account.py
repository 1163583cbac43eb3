"""Customer account forms."""

from flask_wtf import FlaskForm
from wtforms import StringField, BooleanField, IntegerField, TextAreaField, SelectField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional
from .validators import as_text, month_day, pincode


class ProfileForm(FlaskForm):
    name = StringField('Full Name', validators=[Optional(), Length(min=2, max=100)])
    email = StringField('Email', validators=[
        Optional(),
        Email(message='Please enter a valid email address')
    ])
    birthday = StringField('Birthday', validators=[Optional(), month_day])
    anniversary = StringField('Anniversary', validators=[Optional(), month_day])


class AddressForm(FlaskForm):
    """Delivery address form."""
    label = SelectField('Label', choices=[('home', 'Home'), ('work', 'Work'), ('other', 'Other')],
                        default='home', validate_choice=True)
    name = StringField('Recipient Name', validators=[
        DataRequired(message='Name is required'),
        Length(max=100)
    ])
    full_address = TextAreaField('Address', validators=[
        DataRequired(message='Address is required'),
        Length(min=10, max=500, message='Please enter the complete address')
    ])
    city = StringField('City', validators=[DataRequired(message='City is required'), Length(max=100)])
    pincode = StringField('Pincode', filters=[as_text], validators=[DataRequired(message='Pincode is required'), pincode])
    landmark = StringField('Landmark', validators=[Optional(), Length(max=200)])
    is_default = BooleanField('Default address')


class ReminderForm(FlaskForm):
    event_type = SelectField('Event', choices=[
        ('birthday', 'Birthday'), ('anniversary', 'Anniversary'), ('other', 'Other')
    ])
    event_date = StringField('Date', validators=[DataRequired(message='Date is required'), month_day])
    relationship_type = StringField('Relationship', validators=[Optional(), Length(max=50)])
    title = StringField('Title', validators=[DataRequired(message='Title is required'), Length(max=200)])
    days_before = IntegerField('Remind me (days before)', default=7,
                               validators=[Optional(), NumberRange(min=0, max=60)])


class ReviewForm(FlaskForm):
    rating = IntegerField('Rating', validators=[
        DataRequired(message='Rating is required'),
        NumberRange(min=1, max=5, message='Rating must be between 1 and 5')
    ])
    comment = TextAreaField('Comment', validators=[Optional(), Length(max=2000)])
    order_id = IntegerField('Order', validators=[Optional()])


class OrderRatingForm(FlaskForm):
    """Post-delivery feedback."""
    overall_rating = IntegerField('Overall', validators=[
        DataRequired(message='Overall rating is required'),
        NumberRange(min=1, max=5, message='Rating must be between 1 and 5')
    ])
    taste_rating = IntegerField('Taste', validators=[Optional(), NumberRange(min=1, max=5)])
    quality_rating = IntegerField('Quality', validators=[Optional(), NumberRange(min=1, max=5)])
    delivery_rating = IntegerField('Delivery', validators=[Optional(), NumberRange(min=1, max=5)])
    packaging_rating = IntegerField('Packaging', validators=[Optional(), NumberRange(min=1, max=5)])
    delivery_boy_rating = IntegerField('Delivery partner', validators=[Optional(), NumberRange(min=1, max=5)])
    comment = TextAreaField('Comment', validators=[Optional(), Length(max=2000)])
    improvements = TextAreaField('What can we improve?', validators=[Optional(), Length(max=2000)])
    delivery_boy_comment = TextAreaField('Delivery partner comment', validators=[Optional(), Length(max=1000)])
    would_recommend = BooleanField('Would recommend', default=True)
