from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from core.models import Tournament
from errors import DuplicateNameError
from storage.database import is_unique_violation


def get_tournament(conn, tournament_id):
    query = text("""
        SELECT id, name, visible, rules, created_at
        FROM tournaments
        WHERE id = :tournament_id
        """)
    row = conn.execute(query, {"tournament_id": tournament_id}).first()
    return Tournament.from_row(row) if row is not None else None


def get_visible_tournament(conn, tournament_id):
    query = text("""
        SELECT id, name, visible, rules, created_at
        FROM tournaments
        WHERE id = :tournament_id AND visible = :visible
        """)
    row = conn.execute(query, {"tournament_id": tournament_id, "visible": True}).first()
    return Tournament.from_row(row) if row is not None else None


def list_tournaments(conn, order_by="name"):
    """All tournaments, by name or newest first (``order_by='created'``)."""
    order = "created_at DESC, id DESC" if order_by == "created" else "name"
    query = text(f"""
        SELECT id, name, visible, rules, created_at
        FROM tournaments
        ORDER BY {order}
        """)
    return [Tournament.from_row(row) for row in conn.execute(query)]


def list_visible_tournaments(conn):
    query = text("""
        SELECT id, name, visible, rules, created_at
        FROM tournaments
        WHERE visible = :visible
        ORDER BY name
        """)
    return [Tournament.from_row(row) for row in conn.execute(query, {"visible": True})]


def create_tournament(conn, name):
    query = text("""
        INSERT INTO tournaments (name, visible)
        VALUES (:name, :visible)
        RETURNING id
        """)
    try:
        return conn.execute(query, {"name": name, "visible": False}).scalar_one()
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        raise DuplicateNameError(f'A tournament named "{name}" already exists.') from e


def toggle_visibility(conn, tournament_id) -> bool:
    """Flip the visible flag. Returns False when the tournament does not exist."""
    query = text("""
        UPDATE tournaments
        SET visible = NOT visible
        WHERE id = :tournament_id
        """)
    return conn.execute(query, {"tournament_id": tournament_id}).rowcount > 0


def update_rules(conn, tournament_id, rules) -> bool:
    query = text("""
        UPDATE tournaments
        SET rules = :rules
        WHERE id = :tournament_id
        """)
    return conn.execute(query, {"rules": rules, "tournament_id": tournament_id}).rowcount > 0


def delete_tournament(conn, tournament_id) -> bool:
    """Delete a tournament; its teams and matches go with it (ON DELETE CASCADE)."""
    query = text("""
        DELETE FROM tournaments
        WHERE id = :tournament_id
        """)
    return conn.execute(query, {"tournament_id": tournament_id}).rowcount > 0
