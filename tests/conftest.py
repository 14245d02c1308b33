"""
Shared pytest fixtures for tournament manager tests.

Every test gets its own SQLite database file under tmp_path, created with the
production schema and disposed afterwards.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
from datetime import date

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from werkzeug.security import generate_password_hash

from app import create_app
from settings import Settings
from storage.database import Database
from storage import admins as admins_sql
from storage import matches as matches_sql
from storage import teams as teams_sql
from storage import tournaments as tournaments_sql

ADMIN_USER = 'admin'
ADMIN_PASS = 'StrongPassword!123'


class Seeder:
    """Test helper that writes rows through the storage layer."""

    def __init__(self, database):
        self.database = database

    def tournament(self, name, visible=True, rules=None):
        with self.database.connect() as conn:
            tournament_id = tournaments_sql.create_tournament(conn, name)
            if visible:
                tournaments_sql.toggle_visibility(conn, tournament_id)
            if rules is not None:
                tournaments_sql.update_rules(conn, tournament_id, rules)
        return tournament_id

    def team(self, tournament_id, name, **details):
        with self.database.connect() as conn:
            return teams_sql.create_team(conn, tournament_id, name, **details)

    def match(self, tournament_id, home_team_id, away_team_id, match_date=None, score=None):
        with self.database.connect() as conn:
            match_id = matches_sql.create_match(conn, tournament_id, home_team_id, away_team_id,
                                                match_date or date(2026, 3, 1))
            if score is not None:
                matches_sql.record_result(conn, match_id, score[0], score[1])
        return match_id

    def admin(self, username=ADMIN_USER, password=ADMIN_PASS):
        with self.database.connect() as conn:
            return admins_sql.create_admin(conn, username, generate_password_hash(password))

    def scalar(self, sql, **params):
        from sqlalchemy import text
        with self.database.connect() as conn:
            return conn.execute(text(sql), params).scalar()


@pytest.fixture
def database(tmp_path):
    """A fresh database with all tables created."""
    db = Database(f"sqlite:///{tmp_path / 'tournaments.db'}")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def seed(database):
    return Seeder(database)


@pytest.fixture
def app(database):
    """Flask app wired to the test database."""
    settings = Settings(database_url=database.raw_url, secret_key='test-secret')
    flask_app = create_app(settings=settings, database=database)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    """Create a test client (unauthenticated by default)."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def admin_client(app, seed):
    """Create a test client with a logged-in admin session."""
    admin_id = seed.admin()
    with app.test_client() as c:
        with c.session_transaction() as sess:
            sess['admin_id'] = admin_id
            sess['admin_username'] = ADMIN_USER
        yield c
