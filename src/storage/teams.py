from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from core.models import Team
from errors import DuplicateNameError
from storage.database import is_unique_violation

TEAM_COLUMNS = "id, name, owner_name, age, location, contact, tournament_id"


def get_team(conn, team_id):
    query = text(f"""
        SELECT {TEAM_COLUMNS}
        FROM teams
        WHERE id = :team_id
        """)
    row = conn.execute(query, {"team_id": team_id}).first()
    return Team.from_row(row) if row is not None else None


def get_public_team(conn, team_id):
    """The team, only if its tournament is visible."""
    query = text("""
        SELECT t.id, t.name, t.owner_name, t.age, t.location, t.contact, t.tournament_id
        FROM teams t
        JOIN tournaments tr ON tr.id = t.tournament_id
        WHERE t.id = :team_id AND tr.visible = :visible
        """)
    row = conn.execute(query, {"team_id": team_id, "visible": True}).first()
    return Team.from_row(row) if row is not None else None


def list_teams(conn, tournament_id):
    query = text(f"""
        SELECT {TEAM_COLUMNS}
        FROM teams
        WHERE tournament_id = :tournament_id
        ORDER BY name
        """)
    return [Team.from_row(row) for row in conn.execute(query, {"tournament_id": tournament_id})]


def count_teams(conn, tournament_id) -> int:
    query = text("""
        SELECT COUNT(*)
        FROM teams
        WHERE tournament_id = :tournament_id
        """)
    return conn.execute(query, {"tournament_id": tournament_id}).scalar_one()


def team_names(conn, tournament_id) -> set:
    query = text("""
        SELECT name
        FROM teams
        WHERE tournament_id = :tournament_id
        """)
    return set(conn.execute(query, {"tournament_id": tournament_id}).scalars())


def create_team(conn, tournament_id, name, owner_name=None, age=None, location=None, contact=None):
    """Insert a team. The (tournament_id, name) unique constraint rejects duplicates."""
    query = text("""
        INSERT INTO teams (name, owner_name, age, location, contact, tournament_id)
        VALUES (:name, :owner_name, :age, :location, :contact, :tournament_id)
        RETURNING id
        """)
    values = {
        "name": name,
        "owner_name": owner_name,
        "age": age,
        "location": location,
        "contact": contact,
        "tournament_id": tournament_id,
    }
    try:
        return conn.execute(query, values).scalar_one()
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise DuplicateNameError(f'The team "{name}" already exists in this tournament.') from e


def delete_team(conn, team_id) -> bool:
    """Delete a team and, through ON DELETE CASCADE, its matches."""
    query = text("""
        DELETE FROM teams
        WHERE id = :team_id
        """)
    return conn.execute(query, {"team_id": team_id}).rowcount > 0
