"""Tests for table-level constraints."""

import pytest
from sqlalchemy.exc import IntegrityError

from listing_api.models.tables import ROLES
from tests.utils.factories import create_user


@pytest.mark.unit
@pytest.mark.parametrize("role", ROLES)
def test_known_roles_accepted(db, role):
    assert create_user(db, role=role).role == role


@pytest.mark.unit
def test_unknown_role_rejected(db):
    with pytest.raises(IntegrityError):
        create_user(db, role="owner")
    db.rollback()
