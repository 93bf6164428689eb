"""
Seed script to populate a development database with demo accounts.
Run from backend/: python seed.py
"""
import sys
import os
sys.path.insert(0, os.path.dirname(__file__))

from app import create_app, db
from app.models.user import User
from app.utils.seeding import new_user, create_guest_user

DEMO_EMAIL = "demo@medreminder.local"


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        # Premium demo account for trying the reading managers
        demo = User.find_by_email(DEMO_EMAIL)
        if demo:
            print(f"  Demo user already exists (id={demo.id}), skipping.")
        else:
            password = os.getenv("DEMO_PASSWORD")
            if not password:
                print("  DEMO_PASSWORD not set, skipping demo account.")
            else:
                demo = new_user()
                demo.email = DEMO_EMAIL
                demo.display_name = "Demo"
                demo.set_password(password)
                demo.subscription.apply_plan("Premium")
                db.session.commit()
                print(f"  Created Premium demo user (id={demo.id})")

        # Guest account, same data a guest sign-in gets
        guest, inserted = create_guest_user()
        print(f"  Created guest user (id={guest.id}) with {inserted} medication(s)")

        print("\nSeeding complete.")


if __name__ == "__main__":
    seed()
