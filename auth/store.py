"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as teams/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Schema notes:
  username is NOT unique at the SQL level. get_by_username() resolves
  duplicates to the earliest-created row (lowest id).

  team_id is a plain integer column, not a foreign key. The teams table may
  live in the same database or another one; existence is checked by the
  route layer at assignment time. 0 means unassigned.

Layer rule: no imports from api/, core/, or teams/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, index=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default=""),
    Column("team_id", Integer, nullable=False, server_default="0", index=True),
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
        store = UserStore("sqlite:///teamgate.db")
        uid = store.create_user(User(username="alice", hashed_password=hash_password("p1")))
        user = store.get_by_username("alice")
        user.team_id = 3
        store.save_user(user)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def has_users(self) -> bool:
        """Return True if at least one user record exists."""
        with self.engine.connect() as conn:
            result = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        return (result or 0) > 0

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        The caller's dataclass is updated in place with the new id and
        created_at so it can be returned directly.
        """
        created_at = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    hashed_password=user.hashed_password,
                    role=user.role,
                    team_id=user.team_id,
                    created_at=created_at,
                )
            )
            conn.commit()
        user.id = result.inserted_primary_key[0]
        user.created_at = created_at
        return user.id

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where(_users.c.username == username).order_by(_users.c.id).limit(1)
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_by_team(self, team_id: int) -> list[User]:
        """Return every user whose team_id equals team_id, ordered by id."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _users.select().where(_users.c.team_id == team_id).order_by(_users.c.id)
            ).fetchall()
        return [_row_to_user(r) for r in rows]

    def list_users(self) -> list[User]:
        """Return all users ordered by id."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def save_user(self, user: User) -> bool:
        """Write the mutable fields of an existing user back to the database.

        Last write wins: there is no version check. Returns True if a row was
        updated, False if user.id no longer exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == user.id)
                .values(
                    username=user.username,
                    hashed_password=user.hashed_password,
                    role=user.role,
                    team_id=user.team_id,
                )
            )
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
        username=row.username,
        hashed_password=row.hashed_password,
        role=row.role or "",
        team_id=row.team_id or 0,
        created_at=row.created_at,
    )
