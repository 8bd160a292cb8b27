"""PostgreSQL persistence for board messages.

Messages are append-only: the store can insert, list and count rows but
never updates or deletes them. Every public operation opens one connection
and performs a single round trip.
"""

import os
from dataclasses import dataclass
from datetime import datetime

import psycopg
from psycopg import sql
from db_config import get_admin_conn_info, get_db_conn_info, get_db_name

base_conn_info = get_admin_conn_info()
DBNAME = get_db_name()
conn_info = get_db_conn_info()

MESSAGE_COLUMNS = ("id", "name", "content", "created_at")


class StoreError(RuntimeError):
    """Raised when the database rejects or fails an operation."""


class StoreUnavailableError(StoreError):
    """Raised when no connection to the database can be made."""


class MessageValidationError(ValueError):
    """Raised when a row violates the table's required-field constraints."""


@dataclass(frozen=True)
class Message:
    id: int
    name: str
    content: str
    created_at: datetime


@dataclass(frozen=True)
class SortSpec:
    """Explicit ``ORDER BY`` for message listings.

    :param column: Column to order by; must be one of ``MESSAGE_COLUMNS``.
    :param descending: Sort direction.
    """

    column: str
    descending: bool = False

    def __post_init__(self):
        if self.column not in MESSAGE_COLUMNS:
            raise ValueError(f"Cannot sort messages by {self.column!r}")


NEWEST_FIRST = SortSpec("created_at", descending=True)
OLDEST_FIRST = SortSpec("created_at")

# ``None`` leaves ordering to the database.
SORT_SPECS = {
    "newest": NEWEST_FIRST,
    "oldest": OLDEST_FIRST,
    "none": None,
}


def serialize_message(message):
    """Map a message to its JSON shape.

    :param message: Stored message.
    :type message: Message
    :returns: ``id``, ``name``, ``content`` and ISO-8601 ``created_at``.
    :rtype: dict[str, object]
    """
    return {
        "id": message.id,
        "name": message.name,
        "content": message.content,
        "created_at": message.created_at.isoformat(timespec="milliseconds"),
    }


def _row_to_message(row):
    """Build a ``Message`` from an ``(id, name, content, created_at)`` row."""
    message_id, name, content, created_at = row
    return Message(id=message_id, name=name, content=content, created_at=created_at)


def _select_columns():
    return sql.SQL(", ").join(sql.Identifier(column) for column in MESSAGE_COLUMNS)


def _order_clause(sort):
    """Render ``ORDER BY`` for a sort spec, with ``id`` breaking timestamp ties."""
    if sort is None:
        return sql.SQL("")
    direction = sql.SQL("DESC" if sort.descending else "ASC")
    keys = [sql.SQL("{} {}").format(sql.Identifier(sort.column), direction)]
    if sort.column != "id":
        keys.append(sql.SQL("{} {}").format(sql.Identifier("id"), direction))
    return sql.SQL(" ORDER BY ") + sql.SQL(", ").join(keys)


def _translate_error(exc):
    """Map a psycopg failure onto the store's exception types."""
    # DataError covers values Postgres cannot store, e.g. NUL bytes in text.
    if isinstance(exc, (psycopg.IntegrityError, psycopg.DataError)):
        return MessageValidationError(str(exc))
    if isinstance(exc, psycopg.OperationalError):
        return StoreUnavailableError(str(exc))
    return StoreError(str(exc))


def create_message(name, content):
    """Insert one message and return it with its generated id and timestamp.

    :param name: Author/display name.
    :type name: str
    :param content: Message body.
    :type content: str
    :returns: The persisted message.
    :rtype: Message
    :raises MessageValidationError: When a required field is null or blank.
    :raises StoreUnavailableError: When the database cannot be reached.
    :raises StoreError: For any other database failure.
    """
    stmt = sql.SQL(
        "INSERT INTO messages (name, content) VALUES (%s, %s) RETURNING {columns};"
    ).format(columns=_select_columns())
    try:
        with psycopg.connect(conn_info) as conn:
            with conn.cursor() as cur:
                cur.execute(stmt, (name, content))
                row = cur.fetchone()
            conn.commit()
    except psycopg.Error as exc:
        raise _translate_error(exc) from exc
    return _row_to_message(row)


def list_messages(sort=NEWEST_FIRST):
    """Return every stored message in the requested order.

    :param sort: Ordering to apply, or ``None`` for database default order.
    :type sort: SortSpec | None
    :returns: All messages.
    :rtype: list[Message]
    :raises StoreUnavailableError: When the database cannot be reached.
    :raises StoreError: For any other database failure.
    """
    stmt = sql.SQL("SELECT {columns} FROM messages{order};").format(
        columns=_select_columns(),
        order=_order_clause(sort),
    )
    try:
        with psycopg.connect(conn_info) as conn:
            with conn.cursor() as cur:
                cur.execute(stmt)
                rows = cur.fetchall()
    except psycopg.Error as exc:
        raise _translate_error(exc) from exc
    return [_row_to_message(row) for row in rows]


def count_messages():
    """Return the number of stored messages."""
    try:
        with psycopg.connect(conn_info) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM messages;")
                row = cur.fetchone()
    except psycopg.Error as exc:
        raise _translate_error(exc) from exc
    return row[0] if row else 0


def create_db_if_not_exists():
    """Create the message board database with the admin connection.

    Skipped when ``DATABASE_URL`` is set, since provisioning is then
    managed outside the app.

    :returns: ``None``.
    :rtype: None
    """
    if os.getenv('DATABASE_URL'):
        return
    with psycopg.connect(base_conn_info, autocommit=True) as conn:
        with conn.cursor() as cur:
            cur.execute('SELECT 1 FROM pg_database WHERE datname = %s', (DBNAME,))
            exists = cur.fetchone()

            if not exists:
                print(f'Database {DBNAME} not found. Creating it now...')
                stmt = sql.SQL('CREATE DATABASE {db_name}').format(
                    db_name=sql.Identifier(DBNAME)
                )
                cur.execute(stmt)
            else:
                print(f'Database {DBNAME} already exists.')


def ensure_schema():
    """Create the ``messages`` table and its timestamp index when missing.

    :returns: ``None``.
    :rtype: None
    """
    with psycopg.connect(conn_info) as conn:
        with conn.cursor() as cur:
            cur.execute(
                '''
                CREATE TABLE IF NOT EXISTS messages (
                    id BIGSERIAL PRIMARY KEY,
                    name TEXT NOT NULL CHECK (btrim(name) <> ''),
                    content TEXT NOT NULL CHECK (btrim(content) <> ''),
                    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
                );
                '''
            )
            cur.execute(
                'CREATE INDEX IF NOT EXISTS messages_created_at_idx '
                'ON messages (created_at);'
            )
        conn.commit()
    print('Messages table ready.')
