"""
Admin authentication: password checks and the session gate for /admin.
"""
from flask import current_app, redirect, request, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from storage import admins as admins_sql

# Endpoints under /admin reachable without a session
PUBLIC_ADMIN_ENDPOINTS = {'admin.login', 'admin.logout'}

# Checked when the username is unknown so both failure paths cost one hash
_DUMMY_HASH = generate_password_hash('not-a-real-password')


def authenticate_admin(conn, username: str, password: str):
    """Return the Admin for valid credentials, None otherwise."""
    username = (username or '').strip()
    admin = admins_sql.get_admin_by_username(conn, username) if username else None
    if admin is None:
        check_password_hash(_DUMMY_HASH, password or '')
        return None
    if check_password_hash(admin.password_hash, password or ''):
        return admin
    return None


def ensure_bootstrap_admin(conn, username: str, password: str) -> bool:
    """Create the configured admin account if it does not exist yet.

    Returns True when a new account was created.
    """
    if not username or not password:
        return False
    if admins_sql.get_admin_by_username(conn, username) is not None:
        return False
    admins_sql.create_admin(conn, username, generate_password_hash(password))
    return True


def login_admin(admin):
    session.clear()
    session['admin_id'] = admin.id
    session['admin_username'] = admin.username
    session.permanent = True


def current_admin_id():
    return session.get('admin_id')


def require_admin():
    """Blueprint guard: redirect unauthenticated admin requests to the login page."""
    if request.endpoint in PUBLIC_ADMIN_ENDPOINTS:
        return None
    if current_admin_id() is None:
        current_app.logger.info(f'Unauthenticated request to {request.path}, redirecting to login')
        return redirect(url_for('admin.login'))
    return None
