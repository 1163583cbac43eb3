"""Seed script to populate database with sample data."""

from datetime import datetime, timedelta
from cakesbuy import create_app
from cakesbuy.extensions import db
from cakesbuy.models import (User, Category, Cake, Addon, DeliveryArea, PromoCode, DeliveryBoy,
                             LoyaltyReward, AdminConfig, NavigationItem, Page)


def seed_database():
    """Seed the database with sample data."""
    app = create_app()

    with app.app_context():
        # Create tables
        db.create_all()

        # Check if already seeded
        if User.query.filter_by(email='admin@cakesbuy.in').first():
            print('Database already seeded!')
            return

        print('Seeding database...')

        # Create Admin
        admin = User(
            email='admin@cakesbuy.in',
            name='Admin User',
            phone='9999999999',
            role='admin'
        )
        admin.set_password('admin123')
        db.session.add(admin)

        catalogue = [
            {
                'category': {
                    'name': 'Birthday Cakes',
                    'description': 'Celebration cakes for every age, delivered fresh.',
                    'show_on_homepage': True
                },
                'cakes': [
                    {'name': 'Chocolate Truffle', 'base_price': 549, 'flavors': ['Chocolate'],
                     'weights': [{'weight': '0.5kg', 'price': 549}, {'weight': '1kg', 'price': 999}],
                     'tags': ['chocolate', 'bestseller'], 'is_bestseller': True,
                     'description': 'Layers of dark chocolate sponge with silky truffle ganache'},
                    {'name': 'Butterscotch Crunch', 'base_price': 499, 'flavors': ['Butterscotch'],
                     'weights': [{'weight': '0.5kg', 'price': 499}, {'weight': '1kg', 'price': 899}],
                     'tags': ['butterscotch'], 'is_eggless': True,
                     'description': 'Butterscotch sponge with caramel praline crunch'},
                    {'name': 'Photo Print Vanilla', 'base_price': 799, 'flavors': ['Vanilla', 'Pineapple'],
                     'weights': [{'weight': '1kg', 'price': 799}, {'weight': '2kg', 'price': 1499}],
                     'tags': ['photo'], 'is_photo_cake': True, 'is_customizable': True,
                     'description': 'Your favourite photo printed on a vanilla cream cake'},
                ]
            },
            {
                'category': {
                    'name': 'Anniversary Cakes',
                    'description': 'Heart shapes, red velvet and roses.',
                    'show_on_homepage': True
                },
                'cakes': [
                    {'name': 'Red Velvet Heart', 'base_price': 749, 'flavors': ['Red Velvet'],
                     'weights': [{'weight': '1kg', 'price': 1299}],
                     'tags': ['red velvet', 'heart'], 'is_bestseller': True,
                     'description': 'Heart shaped red velvet with cream cheese frosting'},
                    {'name': 'Black Forest', 'base_price': 499, 'flavors': ['Chocolate', 'Cherry'],
                     'weights': [{'weight': '0.5kg', 'price': 499}, {'weight': '1kg', 'price': 899}],
                     'tags': ['classic'],
                     'description': 'Chocolate layers with cherries and whipped cream'},
                ]
            },
            {
                'category': {
                    'name': 'Cupcakes',
                    'description': 'Boxes of six, perfect for sharing.'
                },
                'cakes': [
                    {'name': 'Rainbow Cupcakes (6pc)', 'base_price': 349, 'flavors': ['Vanilla'],
                     'tags': ['kids'], 'description': 'Colourful vanilla cupcakes with buttercream'},
                    {'name': 'Chocolate Cupcakes (6pc)', 'base_price': 379, 'flavors': ['Chocolate'],
                     'tags': ['chocolate'], 'is_eggless': True,
                     'description': 'Rich chocolate cupcakes with ganache'},
                ]
            },
        ]

        for entry in catalogue:
            category = Category(**entry['category'])
            category.generate_slug()
            db.session.add(category)
            db.session.flush()

            for cake_data in entry['cakes']:
                cake = Cake(category_id=category.id, images=['default-cake.png'], **cake_data)
                cake.generate_slug()
                db.session.add(cake)
                db.session.flush()

        # Addons
        addons = [
            {'name': 'Birthday Candles', 'price': 49, 'category': 'candles'},
            {'name': 'Magic Candle', 'price': 99, 'category': 'candles'},
            {'name': 'Balloon Bunch (10pc)', 'price': 199, 'category': 'balloons'},
            {'name': 'Greeting Card', 'price': 79, 'category': 'cards'},
            {'name': 'Red Roses (6pc)', 'price': 349, 'category': 'flowers'},
        ]
        for addon_data in addons:
            db.session.add(Addon(**addon_data))

        # Delivery areas
        areas = [
            {'name': 'Indiranagar', 'pincode': '560038', 'delivery_fee': 49, 'midnight_available': True},
            {'name': 'Koramangala', 'pincode': '560095', 'delivery_fee': 49, 'midnight_available': True},
            {'name': 'HSR Layout', 'pincode': '560102', 'delivery_fee': 59},
            {'name': 'Whitefield', 'pincode': '560066', 'delivery_fee': 99, 'same_day_available': False},
        ]
        for area_data in areas:
            db.session.add(DeliveryArea(free_delivery_threshold=999, **area_data))

        # Promo codes
        db.session.add(PromoCode(
            code='WELCOME10',
            description='10% off your first cake',
            discount_type='percentage',
            discount_value=10,
            min_order_value=499,
            max_discount=150
        ))
        db.session.add(PromoCode(
            code='FLAT100',
            description='₹100 off orders above ₹999',
            discount_type='fixed',
            discount_value=100,
            min_order_value=999,
            usage_limit=500,
            valid_until=datetime.utcnow() + timedelta(days=90)
        ))

        # Loyalty rewards
        rewards = [
            {'name': 'Free Delivery', 'points_cost': 100, 'reward_type': 'free_delivery'},
            {'name': '₹100 Off', 'points_cost': 250, 'reward_type': 'discount', 'reward_value': 100},
            {'name': 'Free Cupcake Box', 'points_cost': 600, 'reward_type': 'free_item',
             'min_tier': 'Silver', 'max_redemptions': 100},
        ]
        for reward_data in rewards:
            db.session.add(LoyaltyReward(**reward_data))

        # Delivery partners
        riders = [
            {'name': 'Ravi Kumar', 'phone': '9123456780', 'vehicle_type': 'bike', 'pincode': '560038'},
            {'name': 'Sunil Das', 'phone': '9234567890', 'vehicle_type': 'scooter', 'pincode': '560095'},
        ]
        for rider_data in riders:
            rider = DeliveryBoy(**rider_data)
            rider.set_password('rider123')
            db.session.add(rider)

        # Settings
        settings = [
            {'key': 'welcome_bonus', 'value': '50', 'type': 'number', 'category': 'rewards',
             'description': 'Wallet credit for new customers'},
            {'key': 'delivery_slots', 'type': 'json', 'category': 'delivery',
             'value': '["10 AM - 1 PM", "1 PM - 5 PM", "5 PM - 9 PM", "11 PM - 12 AM"]',
             'description': 'Delivery time slots shown at checkout'},
        ]
        for setting_data in settings:
            db.session.add(AdminConfig(**setting_data))

        # Storefront
        db.session.flush()
        for position, category in enumerate(Category.query.order_by(Category.id).all()):
            item = NavigationItem(name=category.name, category_id=category.id, position=position)
            item.fill_defaults()
            db.session.add(item)
            db.session.flush()

        about = Page(title='About Us', content='CakesBuy bakes and delivers fresh cakes across Bengaluru.',
                     show_in_menu=True)
        about.generate_slug()
        db.session.add(about)

        # Create sample customers
        customers = [
            {'email': 'john@example.com', 'name': 'John Doe', 'phone': '9876543211',
             'password': 'user123', 'birthday': '03-14'},
            {'email': 'jane@example.com', 'name': 'Jane Smith', 'phone': '9876543212',
             'password': 'user123', 'anniversary': '11-02'},
        ]

        for cust in customers:
            customer = User(
                email=cust['email'],
                name=cust['name'],
                phone=cust['phone'],
                birthday=cust.get('birthday'),
                anniversary=cust.get('anniversary'),
                role='customer'
            )
            customer.set_password(cust['password'])
            db.session.add(customer)
            db.session.flush()
            customer.credit_wallet(app.config['WELCOME_BONUS'], 'Welcome bonus')

        db.session.commit()
        print('Database seeded successfully!')
        print('\nLogin credentials:')
        print('  Admin: 9999999999 / admin123')
        print('  Delivery: 9123456780 / rider123')
        print('  Customer: 9876543211 / user123')


if __name__ == '__main__':
    seed_database()
