#!/usr/bin/env python3
"""
Script to create an admin user for CakesBuy.
Run it from the project root with the same environment (.env) as the API.
"""

from cakesbuy import create_app
from cakesbuy.extensions import db
from cakesbuy.forms.validators import phone_number
from cakesbuy.models import User


def create_admin_user(email, password, name, phone):
    """
    Create an admin user, or promote the existing account with that phone or email.

    Args:
        email: Admin email address
        password: Admin password (will be hashed)
        name: Admin full name
        phone: 10 digit mobile number, used to log in
    """
    user = User.query.filter((User.phone == phone) | (User.email == email)).first()
    if user:
        print(f"User {user.email} ({user.phone}) already exists!")
        print(f"   Current role: {user.role}")

        update = input("Do you want to update this user to admin role? (yes/no): ").lower()
        if update == 'yes':
            user.role = 'admin'
            user.is_active = True
            db.session.commit()
            print(f"User {user.email} updated to admin role!")
        return

    admin = User(email=email, name=name, phone=phone, role='admin')
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    print("Admin user created successfully!")
    print(f"   Email: {email}")
    print(f"   Phone: {phone}")
    print(f"   Name: {name}")
    print("   Role: admin")
    print("\nYou can now log in with these credentials at /api/admin/login")


def main():
    print("=" * 60)
    print("CakesBuy - Admin User Creation")
    print("=" * 60)
    print()

    # Get admin details from user input
    print("Enter admin user details:")
    email = input("Email: ").strip().lower()
    phone = input("Phone: ").strip()
    password = input("Password: ").strip()
    name = input("Full Name: ").strip()

    if not phone_number.regex.match(phone):
        print("Please enter a valid 10 digit mobile number.")
        return
    if len(password) < 6:
        print("Password must be at least 6 characters.")
        return

    print()
    print("Creating admin user with:")
    print(f"  Email: {email}")
    print(f"  Phone: {phone}")
    print(f"  Name: {name}")
    print()

    confirm = input("Proceed? (yes/no): ").lower()
    if confirm != 'yes':
        print("Admin creation cancelled.")
        return

    app = create_app()
    with app.app_context():
        db.create_all()
        create_admin_user(email, password, name, phone)


if __name__ == '__main__':
    main()
