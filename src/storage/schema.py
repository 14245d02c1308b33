from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.sql.sqltypes import Boolean, Date, DateTime, Text

metadata = MetaData()

MATCH_STATUSES = ("scheduled", "played")

tournaments = Table(
    "tournaments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
    Column("visible", Boolean, nullable=False, server_default=false(), default=False),
    Column("rules", Text, nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)

teams = Table(
    "teams",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("owner_name", String(100), nullable=True),
    Column("age", Integer, nullable=True),
    Column("location", String(100), nullable=True),
    Column("contact", String(150), nullable=True),
    Column(
        "tournament_id",
        Integer,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    UniqueConstraint("tournament_id", "name", name="teams_tournament_id_name_key"),
)

matches = Table(
    "matches",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "tournament_id",
        Integer,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("home_team_id", Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
    Column("away_team_id", Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
    Column("home_goals", Integer, nullable=True),
    Column("away_goals", Integer, nullable=True),
    Column("match_date", Date, nullable=False),
    Column("status", String(20), nullable=False, server_default="scheduled", index=True),
    CheckConstraint("home_team_id <> away_team_id", name="matches_distinct_teams"),
    CheckConstraint("status IN ('scheduled', 'played')", name="matches_status_valid"),
    CheckConstraint(
        "(status = 'played' AND home_goals IS NOT NULL AND away_goals IS NOT NULL"
        " AND home_goals >= 0 AND away_goals >= 0)"
        " OR (status = 'scheduled' AND home_goals IS NULL AND away_goals IS NULL)",
        name="matches_goals_iff_played",
    ),
)

admins = Table(
    "admins",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(100), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
)
