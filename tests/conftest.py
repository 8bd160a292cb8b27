import itertools
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Enforce marker discipline so each test maps to a documented suite category.
ALLOWED_MARKERS = {"web", "api", "db", "assets", "integration"}

# Keep `board` and the flat src modules importable from any working dir.
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from message_store import Message, MessageValidationError  # noqa: E402

BASE_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeMessageStore:
    """In-memory store that assigns ids/timestamps and enforces required fields."""

    def __init__(self):
        self._rows = []
        self._ids = itertools.count(1)
        self.create_calls = 0
        self.list_calls = []

    @property
    def rows(self):
        return list(self._rows)

    def count(self):
        return len(self._rows)

    def create_message(self, name, content):
        self.create_calls += 1
        if not name or not content or not name.strip() or not content.strip():
            raise MessageValidationError("violates check constraint")
        message_id = next(self._ids)
        message = Message(
            id=message_id,
            name=name,
            content=content,
            created_at=BASE_TIME + timedelta(seconds=message_id),
        )
        self._rows.append(message)
        return message

    def list_messages(self, sort=None):
        self.list_calls.append(sort)
        if sort is None:
            return list(self._rows)
        return sorted(
            self._rows,
            key=lambda message: (getattr(message, sort.column), message.id),
            reverse=sort.descending,
        )


@pytest.fixture
def fake_store():
    """Provide a fresh in-memory message store per test."""
    return FakeMessageStore()


@pytest.fixture
def app(fake_store):
    """Create the Flask app wired to the in-memory store."""
    from board import create_app

    app = create_app(
        test_config={"TESTING": True, "MESSAGE_SORT": "newest"},
        create_message_fn=fake_store.create_message,
        list_messages_fn=fake_store.list_messages,
    )
    yield app


@pytest.fixture
def client(app):
    """Create test client from the shared app."""
    return app.test_client()


def pytest_configure(config):
    for marker in sorted(ALLOWED_MARKERS):
        config.addinivalue_line("markers", f"{marker}: {marker} suite")


def pytest_collection_modifyitems(session, config, items):
    unmarked = []
    for item in items:
        if not ALLOWED_MARKERS.intersection(item.keywords):
            unmarked.append(item.nodeid)

    if unmarked:
        # Fail collection early so CI does not run partially categorized suites.
        joined = "\n".join(f"- {nodeid}" for nodeid in unmarked)
        raise pytest.UsageError(
            "Each test must include at least one approved marker "
            f"({', '.join(sorted(ALLOWED_MARKERS))}).\n"
            "Unmarked tests:\n"
            f"{joined}"
        )
