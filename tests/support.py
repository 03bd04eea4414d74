"""Shared helpers for service and API tests: a throwaway SQLite database."""

import os
import tempfile
import unittest

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from stockroom.core import security
from stockroom.models import Base, RoleId, User
from stockroom.services.identity import create_user, seed_roles

# HMAC keys shorter than the digest size trigger PyJWT warnings.
TEST_SECRET = "stockroom-test-secret-0123456789abcdef"
TEST_PASSWORD = "password123"

# Minimum bcrypt cost keeps user fixtures fast.
security.BCRYPT_ROUNDS = 4


def _on_connect(dbapi_connection, connection_record) -> None:
    # Let SQLAlchemy's "begin" event issue BEGIN instead of pysqlite.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_begin(conn) -> None:
    # Take the write lock up front so read-then-write transactions serialize
    # the way SELECT ... FOR UPDATE does on PostgreSQL.
    conn.exec_driver_sql("BEGIN IMMEDIATE")


class TempDatabase:
    """File-backed SQLite database with all tables created and roles seeded."""

    def __init__(self) -> None:
        fd, self.path = tempfile.mkstemp(prefix="stockroom-", suffix=".sqlite3")
        os.close(fd)
        self.engine = create_engine(
            f"sqlite:///{self.path}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        event.listen(self.engine, "connect", _on_connect)
        event.listen(self.engine, "begin", _on_begin)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)
        with self.SessionLocal() as db:
            seed_roles(db)

    def session(self, **kwargs) -> Session:
        return self.SessionLocal(**kwargs)

    def get_db(self):
        """Drop-in override for stockroom.core.database.get_db."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        try:
            os.remove(self.path)
        except OSError:
            pass


def make_user(
    db: Session,
    username: str,
    role: RoleId = RoleId.MANAGER,
    display_name: str | None = None,
) -> User:
    return create_user(
        db,
        username=username,
        password=TEST_PASSWORD,
        role_id=role,
        display_name=display_name,
    )


class DatabaseTestCase(unittest.TestCase):
    """Fresh database per test; service calls run in their own short session."""

    def setUp(self) -> None:
        self.database = TempDatabase()

    def tearDown(self) -> None:
        self.database.dispose()

    def call(self, fn, *args, **kwargs):
        """Run fn(db, ...) in a session that is closed afterwards, like one request."""
        with self.database.session() as db:
            return fn(db, *args, **kwargs)

    def add_user(
        self,
        username: str,
        role: RoleId = RoleId.MANAGER,
        display_name: str | None = None,
    ) -> User:
        return self.call(make_user, username, role, display_name)
