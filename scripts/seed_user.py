"""Seed a pre-verified account for local development."""

import os

from app import create_app
from models import db
from models.user import User

SEED_EMAIL = os.getenv("SEED_EMAIL", "dev@example.com")
SEED_PASSWORD = os.getenv("SEED_PASSWORD", "DevPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=SEED_EMAIL).first()
        if user is None:
            user = User(
                first_name="Dev",
                last_name="User",
                email=SEED_EMAIL,
                verified=True,
            )
            user.set_password(SEED_PASSWORD)
            db.session.add(user)
            action = "created"
        else:
            user.verified = True
            user.set_password(SEED_PASSWORD)
            action = "updated"
        db.session.commit()
        print(f"Verified user {action}: {SEED_EMAIL}")


if __name__ == "__main__":
    main()
