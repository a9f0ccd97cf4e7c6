"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) and UNIQUE(user_name) are enforced in SQL. Callers catch
  sqlalchemy.exc.IntegrityError to detect a concurrent duplicate registration.

  Emails are normalized to lower case on every write and lookup so
  "Ada@Example.com" and "ada@example.com" are the same account.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

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
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("user_name", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("is_email_verified", Integer, nullable=False, server_default="0"),
    Column("temp_password", String(64), index=True),  # NULL when no reset is pending
    Column("temp_password_expires_at", String(32)),
    Column("created_at", String(32), nullable=False),
    Column("last_login", String(32)),
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


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_expired(expires_at: str | None) -> bool:
    if not expires_at:
        return False
    return datetime.fromisoformat(expires_at) <= datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore()
        uid = store.create_user(User(first_name="Ada", last_name="Lovelace", user_name="ada",
                                     email="ada@example.com", hashed_password=hash_password("secret")))
        user = store.get_by_user_name("ada")
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
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email or user_name already
        exists. Callers translate that into an HTTP error.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    first_name=user.first_name,
                    last_name=user.last_name,
                    user_name=user.user_name,
                    email=user.email.lower(),
                    hashed_password=user.hashed_password,
                    is_email_verified=1 if user.is_email_verified else 0,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def set_temp_password(self, user_id: int, token: str, expires_at: str | None) -> bool:
        """Store a reset token on the user, replacing any token already pending.

        Returns True if a row was updated, False if user_id was not found.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(temp_password=token, temp_password_expires_at=expires_at)
            )
            conn.commit()
        return result.rowcount > 0

    def reset_password(self, user_id: int, token: str, hashed_password: str) -> bool:
        """Consume a reset token: write the new password hash and clear the token.

        The UPDATE only matches while the user still holds this exact token, so
        of two concurrent resets with the same token exactly one succeeds, and a
        token reissued in the meantime is left untouched.

        Returns True if the token was consumed, False if it was no longer pending.
        """
        if not token:
            return False
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where((_users.c.id == user_id) & (_users.c.temp_password == token))
                .values(hashed_password=hashed_password, temp_password=None, temp_password_expires_at=None)
            )
            conn.commit()
        return result.rowcount > 0

    def update_last_login(self, user_id: int) -> None:
        """Stamp the current UTC timestamp as last_login for the given user."""
        with self.engine.connect() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(last_login=_now_iso()))
            conn.commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email.lower())).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_user_name(self, user_name: str) -> User | None:
        """Look up a user by exact user_name (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.user_name == user_name)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_temp_password(self, token: str | None) -> User | None:
        """Look up the user holding an unexpired reset token.

        An empty token never matches, so a cleared column can't be hit by a
        request that omits the token. Expired tokens are treated as unknown.
        """
        if not token:
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.temp_password == token)).fetchone()
        if row is None or _is_expired(row.temp_password_expires_at):
            return None
        return _row_to_user(row)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        user_name=row.user_name,
        email=row.email,
        hashed_password=row.hashed_password,
        is_email_verified=bool(row.is_email_verified),
        temp_password=row.temp_password,
        temp_password_expires_at=row.temp_password_expires_at,
        created_at=row.created_at,
        last_login=row.last_login,
    )
