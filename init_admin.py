import os

from dotenv import load_dotenv


# ======================================================
# ENV
# ======================================================

load_dotenv()

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrator")

if not os.getenv("DATABASE_URL"):
    raise RuntimeError("DATABASE_URL is not set")

if not ADMIN_EMAIL:
    raise RuntimeError("ADMIN_EMAIL is not set")


# Imported after load_dotenv so Settings sees the .env values
from listing_api.database import SessionLocal, init_db  # noqa: E402
from listing_api.models.tables import Users  # noqa: E402


# ======================================================
# BOOTSTRAP
# ======================================================

def init_admin() -> int:
    """
    Create the first admin, or promote an existing user with ADMIN_EMAIL.

    Idempotent: running it twice leaves one admin row.
    """
    init_db()

    db = SessionLocal()
    try:
        user = db.query(Users).filter(Users.email == ADMIN_EMAIL).first()

        if user is None:
            user = Users(name=ADMIN_NAME, email=ADMIN_EMAIL, role="admin")
            db.add(user)
            print(f"Creating admin {ADMIN_EMAIL}")
        elif user.role != "admin" or not user.is_active:
            user.role = "admin"
            user.is_active = 1
            print(f"Promoting {ADMIN_EMAIL} to admin")
        else:
            print(f"Admin {ADMIN_EMAIL} already exists")

        db.commit()
        db.refresh(user)
        return user.id
    finally:
        db.close()


if __name__ == "__main__":
    admin_id = init_admin()
    print(f"✔ admin user_id={admin_id}")
