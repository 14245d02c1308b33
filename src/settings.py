"""
Environment-driven configuration for the tournament manager.
"""
import os
import logging
from datetime import timedelta

logger = logging.getLogger(__name__)

PRODUCTION = 'production'
DEVELOPMENT = 'development'


def _int_env(environ, name: str, default: int) -> int:
    """Read an integer variable, falling back to *default* when unset or blank."""
    raw = environ.get(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f'Ignoring non-integer {name}={raw!r}, using {default}')
        return default


class Settings:
    def __init__(self, database_url=None, secret_key=None, admin_user='admin', admin_password=None,
                 env=DEVELOPMENT, pool_size=5, max_overflow=5, connect_timeout=10, sslmode=None,
                 session_lifetime_hours=12, log_level='INFO'):
        self.database_url = database_url
        self.secret_key = secret_key
        self.admin_user = admin_user
        self.admin_password = admin_password
        self.env = env
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.connect_timeout = connect_timeout
        self.sslmode = sslmode or ('require' if env == PRODUCTION else 'prefer')
        self.session_lifetime = timedelta(hours=session_lifetime_hours)
        self.log_level = log_level

    @property
    def is_production(self) -> bool:
        return self.env == PRODUCTION

    @classmethod
    def from_env(cls, environ=None):
        """Build settings from environment variables (``os.environ`` by default)."""
        environ = os.environ if environ is None else environ
        secret = environ.get('SESSION_SECRET') or environ.get('SECRET_KEY')
        if not secret:
            logger.warning('SESSION_SECRET not set; generating a per-process key, '
                           'admin sessions will not survive a restart')
            secret = os.urandom(24)
        return cls(
            database_url=environ.get('DATABASE_URL') or None,
            secret_key=secret,
            admin_user=environ.get('ADMIN_USER', 'admin'),
            admin_password=environ.get('ADMIN_PASS') or None,
            env=environ.get('APP_ENV', DEVELOPMENT).strip().lower(),
            pool_size=_int_env(environ, 'DB_POOL_SIZE', 5),
            max_overflow=_int_env(environ, 'DB_MAX_OVERFLOW', 5),
            connect_timeout=_int_env(environ, 'DB_CONNECT_TIMEOUT', 10),
            sslmode=environ.get('DB_SSLMODE') or None,
            session_lifetime_hours=_int_env(environ, 'SESSION_LIFETIME_HOURS', 12),
            log_level=environ.get('LOG_LEVEL', 'INFO').upper(),
        )

    def __repr__(self):
        configured = 'configured' if self.database_url else 'not configured'
        return f"Settings(env={self.env}, database={configured}, admin_user={self.admin_user})"
