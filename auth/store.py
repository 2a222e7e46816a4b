"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper (same as farm/store.py).
UserStore is the repository; _row_to_user is the mapper.
Service and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  UNIQUE(email) and UNIQUE(username) are enforced by the schema; a duplicate
  insert raises sqlalchemy.exc.IntegrityError for the caller to translate.

Layer rule: no imports from api/ or farm/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import get_settings

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("firstname", String(255), nullable=False),
    Column("lastname", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("verified", Integer, nullable=False, server_default="0"),
    Column("verification_token", String(16)),  # NULL when no code is outstanding
    Column("reset_token", String(16)),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore()
        uid = store.create_user(User(email="a@x.com", username="alice", ...))
        user = store.get_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        return result or 0

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email or username is
        already taken.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=user.email,
                    username=user.username,
                    firstname=user.firstname,
                    lastname=user.lastname,
                    hashed_password=user.hashed_password,
                    verified=1 if user.verified else 0,
                    verification_token=user.verification_token,
                    reset_token=user.reset_token,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def update_by_email(self, email: str, **fields) -> bool:
        """Update mutable fields on the account identified by email.

        Accepted fields: verified, verification_token, reset_token,
        hashed_password. verified must be passed as bool; this method
        converts to int for SQLite.

        Returns True if a row was updated, False if the email was not found.
        """
        if "verified" in fields:
            fields["verified"] = 1 if fields["verified"] else 0
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.email == email).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        username=row.username,
        firstname=row.firstname,
        lastname=row.lastname,
        hashed_password=row.hashed_password,
        verified=bool(row.verified),
        verification_token=row.verification_token,
        reset_token=row.reset_token,
        created_at=row.created_at,
    )
