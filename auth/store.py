"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper. UserStore is the repository;
_row_to_user / _row_to_public are the mappers. Service and route code never
touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Passwords are hashed by an explicit PasswordVerifier.hash() call inside
  create() and set_password(). There is no save hook: the plaintext never
  reaches an INSERT or UPDATE statement.

  UNIQUE(username) and UNIQUE(email) are enforced by the schema. create()
  turns the resulting IntegrityError into DuplicateUserError so callers that
  lose a registration race still see a Conflict rather than a raw DB error.

Normalization:
  username and email are stripped and lower-cased on write AND on lookup, so
  "Ada" and "ada" are the same login identifier. fullname is only stripped.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, or_, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import Pool

from auth.errors import DuplicateUserError
from auth.models import PublicUser, User
from auth.passwords import PasswordVerifier

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("fullname", String(255), nullable=False),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("refresh_token", Text),  # NULL when logged out
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Columns safe to return to a client. Never add hashed_password or refresh_token.
_PUBLIC_COLUMNS = (
    _users.c.id,
    _users.c.fullname,
    _users.c.username,
    _users.c.email,
    _users.c.created_at,
    _users.c.updated_at,
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


def normalize_identifier(value: str | None) -> str | None:
    """Strip and lower-case a username or email. None and blank become None."""
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records and their stored refresh token.

    Usage:
        store = UserStore("sqlite:///:memory:", PasswordVerifier(rounds=4))
        user_id = store.create("Ada Lovelace", "ada", "ada@x.com", "s3cret")
        user = store.find_by_login_identifier(username="ada")
        store.close()
    """

    def __init__(
        self,
        db_url: str,
        verifier: PasswordVerifier | None = None,
        poolclass: type[Pool] | None = None,
    ) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        engine_kwargs: dict = {"connect_args": connect_args}
        if poolclass is not None:
            # Required for shared in-memory SQLite URIs (mode=memory).
            engine_kwargs["poolclass"] = poolclass
        self.engine: Engine = create_engine(db_url, **engine_kwargs)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)
        self.verifier = verifier or PasswordVerifier()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_login_identifier(self, username: str | None = None, email: str | None = None) -> User | None:
        """Return the user whose username OR email matches. None if not found.

        Absent identifiers never match: find_by_login_identifier(email=x)
        only compares the email column.
        """
        conditions = []
        username = normalize_identifier(username)
        email = normalize_identifier(email)
        if username:
            conditions.append(_users.c.username == username)
        if email:
            conditions.append(_users.c.email == email)
        if not conditions:
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(or_(*conditions)).order_by(_users.c.id)).first()
        return _row_to_user(row) if row is not None else None

    def find_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_public_view(self, user_id: int) -> PublicUser | None:
        """Return the client-safe projection of a user, or None if not found.

        Selects only the public columns, so the secret columns are never even
        loaded for this path.
        """
        with self.engine.connect() as conn:
            row = conn.execute(select(*_PUBLIC_COLUMNS).where(_users.c.id == user_id)).fetchone()
        return _row_to_public(row) if row is not None else None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, fullname: str, username: str, email: str, raw_password: str) -> int:
        """Hash the password, insert a new user, and return its ID.

        Raises DuplicateUserError if the username or email already exists.
        """
        hashed = self.verifier.hash(raw_password)
        now = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        fullname=fullname.strip(),
                        username=normalize_identifier(username),
                        email=normalize_identifier(email),
                        hashed_password=hashed,
                        refresh_token=None,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateUserError("A user with that username or email already exists.") from exc
        return result.inserted_primary_key[0]

    def set_refresh_token(self, user_id: int, token: str) -> bool:
        """Overwrite the stored refresh token. Returns False if user_id is unknown."""
        return self._update(user_id, refresh_token=token)

    def clear_refresh_token(self, user_id: int) -> bool:
        """Remove the stored refresh token. Safe to call when already cleared."""
        return self._update(user_id, refresh_token=None)

    def set_password(self, user_id: int, raw_password: str) -> bool:
        """Hash raw_password and store it. Returns False if user_id is unknown."""
        return self._update(user_id, hashed_password=self.verifier.hash(raw_password))

    def _update(self, user_id: int, **fields) -> bool:
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        fullname=row.fullname,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        refresh_token=row.refresh_token,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_public(row) -> PublicUser:
    return PublicUser(
        id=row.id,
        fullname=row.fullname,
        username=row.username,
        email=row.email,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
