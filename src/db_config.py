"""Database connection settings read from the environment.

A project-root ``.env`` fills in anything not already exported. The app
role uses ``DATABASE_URL`` or ``DB_*``; provisioning uses
``DATABASE_ADMIN_URL`` or ``DB_ADMIN_*``, each falling back to its ``DB_*``
counterpart.
"""

import os
from pathlib import Path

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


def _load_env_file(path: Path) -> None:
    """Export ``KEY=VALUE`` lines from ``path`` without overriding the environment.

    :param path: ``.env``-style file; missing files are ignored.
    :type path: pathlib.Path
    """
    if not path.exists():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip().removeprefix("export ").strip()
        if line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if key:
            os.environ.setdefault(key, value.strip("\"'"))


_load_env_file(ENV_FILE)


def _setting(prefix: str, key: str, default: str | None = None) -> str | None:
    # Admin settings inherit the app role's value when unset.
    value = os.getenv(f"{prefix}_{key}")
    if value is None and prefix != "DB":
        value = os.getenv(f"DB_{key}")
    return default if value is None else value


def _conn_info(prefix: str, dbname: str) -> str:
    parts = {
        "host": _setting(prefix, "HOST", "localhost"),
        "port": _setting(prefix, "PORT", "5432"),
        "dbname": dbname,
        "user": _setting(prefix, "USER"),
        "password": _setting(prefix, "PASSWORD"),
    }
    return " ".join(f"{key}={value}" for key, value in parts.items() if value)


def get_db_name() -> str:
    """Return the message board database name (``DB_NAME``)."""
    return os.getenv("DB_NAME", "message_board")


def get_db_conn_info() -> str:
    """Return the app role's psycopg connection info.

    :returns: ``DATABASE_URL`` when set, else a string built from ``DB_*``.
    :rtype: str
    """
    return os.getenv("DATABASE_URL") or _conn_info("DB", get_db_name())


def get_admin_conn_info() -> str:
    """Return connection info for the role that creates the database.

    :returns: ``DATABASE_ADMIN_URL`` when set, else a string built from
        ``DB_ADMIN_*`` against ``DB_ADMIN_NAME`` (default ``postgres``).
    :rtype: str
    """
    admin_url = os.getenv("DATABASE_ADMIN_URL")
    if admin_url:
        return admin_url
    return _conn_info("DB_ADMIN", os.getenv("DB_ADMIN_NAME", "postgres"))
