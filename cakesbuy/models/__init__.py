"""Database models package."""

from .wallet import WalletTransaction
from .loyalty import LoyaltyTransaction, LoyaltyReward, UserReward
from .user import User, Address
from .category import Category
from .cake import Cake, Addon
from .notification import Notification
from .order import Order, OrderItem, OrderStatusHistory, ORDER_STATUSES, ORDER_TRANSITIONS
from .promo_code import PromoCode
from .review import Review, OrderRating
from .delivery import DeliveryArea, DeliveryBoy
from .vendor import Vendor
from .reminder import EventReminder
from .otp import OtpVerification
from .content import Page, NavigationItem
from .invoice import Invoice
from .payment import PhonePeTransaction
from .setting import AdminConfig

__all__ = [
    'User',
    'Address',
    'Category',
    'Cake',
    'Addon',
    'Order',
    'OrderItem',
    'OrderStatusHistory',
    'ORDER_STATUSES',
    'ORDER_TRANSITIONS',
    'PromoCode',
    'Review',
    'OrderRating',
    'Notification',
    'DeliveryArea',
    'DeliveryBoy',
    'Vendor',
    'WalletTransaction',
    'LoyaltyTransaction',
    'LoyaltyReward',
    'UserReward',
    'EventReminder',
    'OtpVerification',
    'Page',
    'NavigationItem',
    'Invoice',
    'PhonePeTransaction',
    'AdminConfig',
]
