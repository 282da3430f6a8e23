"""User directory and property catalog lookups used by the booking core."""

from sqlalchemy.orm import Session

from ..models.tables import Properties, Users


def resolve_user(db: Session, user_id: int) -> Users | None:
    """Active user by ID, or None."""
    return (
        db.query(Users)
        .filter(Users.id == user_id, Users.is_active == 1)
        .first()
    )


def resolve_property(db: Session, property_id: int) -> Properties | None:
    """Listed (not deleted) property by ID, or None."""
    return (
        db.query(Properties)
        .filter(Properties.id == property_id, Properties.is_deleted == 0)
        .first()
    )
