"""One-time password model."""

from datetime import datetime, timedelta
from cakesbuy.extensions import db
from cakesbuy.utils.helpers import random_digits


class OtpVerification(db.Model):
    __tablename__ = 'otp_verifications'

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(15), nullable=False, index=True)
    otp = db.Column(db.String(6), nullable=False)
    is_used = db.Column(db.Boolean, default=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @staticmethod
    def issue(phone, expiry_minutes=5):
        """Create a fresh 6 digit OTP for a phone number."""
        otp = OtpVerification(
            phone=phone,
            otp=random_digits(6),
            expires_at=datetime.utcnow() + timedelta(minutes=expiry_minutes)
        )
        db.session.add(otp)
        return otp

    @staticmethod
    def verify(phone, code):
        """Consume a matching, unexpired OTP. Returns True on success."""
        record = OtpVerification.query.filter(
            OtpVerification.phone == phone,
            OtpVerification.otp == str(code or ''),
            OtpVerification.is_used == False,  # noqa: E712
            OtpVerification.expires_at > datetime.utcnow()
        ).order_by(OtpVerification.created_at.desc()).first()
        if record is None:
            return False
        record.is_used = True
        return True

    def __repr__(self):
        return f'<OtpVerification {self.phone}>'
