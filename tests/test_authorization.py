"""Unit tests for stockroom.services.authorization: role resolution and capability checks."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

from stockroom.core.errors import Forbidden, Unauthenticated
from stockroom.models import RoleId
from stockroom.schemas.auth import TokenClaims
from stockroom.services.authorization import (
    DENY_IDENTITY_NOT_FOUND,
    DENY_INSUFFICIENT_ROLE,
    DENY_NO_IDENTITY,
    Capability,
    authorize,
    require,
)


def _claims(role: RoleId = RoleId.MANAGER, subject_id: int = 5) -> TokenClaims:
    now = datetime.now(UTC)
    return TokenClaims(
        subject_id=subject_id,
        display_name="Marta Gestora",
        role_id=int(role),
        issued_at=now,
        expires_at=now + timedelta(hours=1),
    )


def _db_with_user(role: RoleId | None, subject_id: int = 5) -> MagicMock:
    db = MagicMock()
    if role is None:
        db.get.return_value = None
    else:
        db.get.return_value = SimpleNamespace(
            id=subject_id, display_name="Marta Gestora", role_id=int(role)
        )
    return db


class TestMutateInventoryCapability(unittest.TestCase):
    """Administrator and Manager may mutate; Reader and anonymous may not."""

    def test_administrator_and_manager_allowed(self) -> None:
        for role in (RoleId.ADMINISTRATOR, RoleId.MANAGER):
            db = _db_with_user(role)
            decision = authorize(_claims(role), Capability.MUTATE_INVENTORY, db)
            self.assertTrue(decision.allowed, role)
            self.assertEqual(decision.identity.role_id, int(role))

    def test_reader_denied_for_insufficient_role(self) -> None:
        db = _db_with_user(RoleId.READER)
        decision = authorize(_claims(RoleId.READER), Capability.MUTATE_INVENTORY, db)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, DENY_INSUFFICIENT_ROLE)
        self.assertIn("Administrator or Manager", decision.message)

    def test_missing_claims_denied_as_no_identity(self) -> None:
        decision = authorize(None, Capability.MUTATE_INVENTORY, MagicMock())
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, DENY_NO_IDENTITY)

    def test_unknown_role_id_denied(self) -> None:
        db = _db_with_user(None)
        db.get.return_value = SimpleNamespace(id=5, display_name="x", role_id=99)
        decision = authorize(_claims(), Capability.MUTATE_INVENTORY, db)
        self.assertEqual(decision.reason, DENY_INSUFFICIENT_ROLE)


class TestRoleSourceDatabase(unittest.TestCase):
    """Default strategy: role is re-read from the users table on every call."""

    def test_reads_user_once(self) -> None:
        db = _db_with_user(RoleId.MANAGER)
        authorize(_claims(), Capability.MUTATE_INVENTORY, db, role_source="database")
        self.assertEqual(db.get.call_count, 1)

    def test_demotion_applies_immediately(self) -> None:
        # Token still says Manager, the row says Reader.
        db = _db_with_user(RoleId.READER)
        decision = authorize(
            _claims(RoleId.MANAGER), Capability.MUTATE_INVENTORY, db, role_source="database"
        )
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, DENY_INSUFFICIENT_ROLE)

    def test_deleted_user_denied_as_identity_not_found(self) -> None:
        db = _db_with_user(None)
        decision = authorize(_claims(), Capability.MUTATE_INVENTORY, db, role_source="database")
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, DENY_IDENTITY_NOT_FOUND)

    def test_requires_session(self) -> None:
        with self.assertRaises(ValueError):
            authorize(_claims(), Capability.MUTATE_INVENTORY, None, role_source="database")


class TestRoleSourceToken(unittest.TestCase):
    """Claims-trust strategy: no database read, role taken from the token."""

    def test_no_read_and_claim_role_used(self) -> None:
        db = _db_with_user(RoleId.READER)
        decision = authorize(
            _claims(RoleId.MANAGER), Capability.MUTATE_INVENTORY, db, role_source="token"
        )
        self.assertTrue(decision.allowed)
        db.get.assert_not_called()

    def test_works_without_session(self) -> None:
        decision = authorize(
            _claims(RoleId.ADMINISTRATOR), Capability.ADMINISTER_USERS, None, role_source="token"
        )
        self.assertTrue(decision.allowed)
        self.assertEqual(decision.identity.id, 5)


class TestOtherCapabilities(unittest.TestCase):
    def test_read_needs_no_identity(self) -> None:
        db = MagicMock()
        decision = authorize(None, Capability.READ, db)
        self.assertTrue(decision.allowed)
        self.assertIsNone(decision.identity)
        db.get.assert_not_called()

    def test_administer_users_is_administrator_only(self) -> None:
        manager = authorize(
            _claims(RoleId.MANAGER), Capability.ADMINISTER_USERS, _db_with_user(RoleId.MANAGER)
        )
        admin = authorize(
            _claims(RoleId.ADMINISTRATOR),
            Capability.ADMINISTER_USERS,
            _db_with_user(RoleId.ADMINISTRATOR),
        )
        self.assertFalse(manager.allowed)
        self.assertTrue(admin.allowed)

    def test_authenticated_allows_reader(self) -> None:
        decision = authorize(
            _claims(RoleId.READER), Capability.AUTHENTICATED, _db_with_user(RoleId.READER)
        )
        self.assertTrue(decision.allowed)


class TestRequire(unittest.TestCase):
    """require() maps denials onto Unauthenticated / Forbidden."""

    def test_returns_identity_when_allowed(self) -> None:
        identity = require(_claims(), Capability.MUTATE_INVENTORY, _db_with_user(RoleId.MANAGER))
        self.assertEqual(identity.id, 5)
        self.assertEqual(identity.display_name, "Marta Gestora")

    def test_no_identity_raises_unauthenticated(self) -> None:
        with self.assertRaises(Unauthenticated) as ctx:
            require(None, Capability.MUTATE_INVENTORY, MagicMock())
        self.assertEqual(ctx.exception.status_code, 401)

    def test_identity_not_found_raises_unauthenticated(self) -> None:
        with self.assertRaises(Unauthenticated) as ctx:
            require(_claims(), Capability.MUTATE_INVENTORY, _db_with_user(None))
        self.assertEqual(ctx.exception.message, "User not found")

    def test_reader_raises_forbidden(self) -> None:
        with self.assertRaises(Forbidden) as ctx:
            require(_claims(RoleId.READER), Capability.MUTATE_INVENTORY, _db_with_user(RoleId.READER))
        self.assertEqual(ctx.exception.status_code, 403)


if __name__ == "__main__":
    unittest.main()
