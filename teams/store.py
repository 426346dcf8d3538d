"""
teams/store.py -- SQLAlchemy-backed persistence layer for teams.

Uses SQLAlchemy Core (not ORM) so the Team dataclass in teams/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change.

Pattern: Repository + Data Mapper. TeamStore is the repository, _row_to_team
is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TeamStore("sqlite:///teamgate.db")        # SQLite
    store = TeamStore("postgresql://user:pw@host/db") # PostgreSQL
    team_id = store.create_team(Team(name="platform"))
    team = store.get_by_id(team_id)
    team.name = "infra"
    store.save_team(team)
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, event, text
from sqlalchemy.engine import Engine

from teams.models import Team

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_teams = Table(
    "teams",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TeamStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def create_team(self, team: Team) -> int:
        """Insert a team and return its new id. Fills team.id and team.created_at in place."""
        created_at = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_teams.insert().values(name=team.name, created_at=created_at))
            conn.commit()
        team.id = result.inserted_primary_key[0]
        team.created_at = created_at
        return team.id

    def get_by_id(self, team_id: int) -> Optional[Team]:
        """Return the team with this id, or None."""
        with self.engine.connect() as conn:
            row = conn.execute(_teams.select().where(_teams.c.id == team_id)).fetchone()
        return _row_to_team(row) if row is not None else None

    def save_team(self, team: Team) -> bool:
        """Persist the team's name. Returns False if the row has disappeared."""
        with self.engine.connect() as conn:
            result = conn.execute(_teams.update().where(_teams.c.id == team.id).values(name=team.name))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_team(row) -> Team:
    return Team(id=row.id, name=row.name, created_at=row.created_at)
