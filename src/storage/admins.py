from sqlalchemy import text

from core.models import Admin


def get_admin_by_username(conn, username):
    query = text("""
        SELECT id, username, password_hash
        FROM admins
        WHERE username = :username
        """)
    row = conn.execute(query, {"username": username}).first()
    return Admin.from_row(row) if row is not None else None


def create_admin(conn, username, password_hash):
    query = text("""
        INSERT INTO admins (username, password_hash)
        VALUES (:username, :password_hash)
        RETURNING id
        """)
    return conn.execute(query, {"username": username, "password_hash": password_hash}).scalar_one()
