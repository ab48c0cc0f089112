"""
Pytest fixtures for backend tests.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from reader_backend.config import state
from reader_backend.database import Database, DatabaseConnection
from reader_backend.server import app
from reader_backend.services import EntryService

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(hours: float) -> datetime:
    """A fixed point in time, `hours` after BASE_TIME."""
    return BASE_TIME + timedelta(hours=hours)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def library(test_db):
    """
    Two users with overlapping subscriptions.

    alice:
        tech (tagged "Tech"): t1, t2, t3
        news (uncategorized): n1, n2
        mail (uncategorized, email): m1, m2 (spam)
        saved: s1
    bob:
        tech (tagged "Mine"): t1, t2, t3
        bob feed: b1

    Entries are fetched one hour apart in the order listed, none has a
    published date, and everything starts unread.
    """
    db = test_db
    alice = db.users.create("alice@example.com", user_id="alice")
    bob = db.users.create("bob@example.com", user_id="bob")

    tech = db.feeds.add("https://tech.example.com/feed.xml", "Tech Blog")
    news = db.feeds.add("https://news.example.com/rss", "Daily News")
    mail = db.feeds.add(None, "Newsletter", feed_type="email")
    bob_feed = db.feeds.add("https://bob.example.com/feed", "Bob's Feed")

    sub_tech = db.subscriptions.subscribe(alice, tech)
    sub_news = db.subscriptions.subscribe(alice, news)
    sub_mail = db.subscriptions.subscribe(alice, mail)
    tag_tech = db.tags.create(alice, "Tech")
    db.tags.attach(alice, sub_tech, tag_tech)

    bob_sub_tech = db.subscriptions.subscribe(bob, tech)
    bob_sub_own = db.subscriptions.subscribe(bob, bob_feed)
    bob_tag = db.tags.create(bob, "Mine")
    db.tags.attach(bob, bob_sub_tech, bob_tag)

    db.entries.add(tech, "Python packaging guide", content="How to build wheels with setuptools",
                   fetched_at=at(1), entry_id="t1")
    db.entries.add(tech, "Rust async runtime", content="Tokio internals explained",
                   fetched_at=at(2), entry_id="t2")
    db.entries.add(tech, "Python typing tips", content="Protocols and generics in practice",
                   fetched_at=at(3), entry_id="t3")
    db.entries.add(news, "Election results", content="Votes were counted overnight",
                   fetched_at=at(4), entry_id="n1")
    db.entries.add(news, "Weather report", content="Rain expected through the weekend",
                   fetched_at=at(5), entry_id="n2")
    db.entries.add(mail, "Weekly newsletter", content="Links from around the web",
                   fetched_at=at(6), entry_type="email", entry_id="m1")
    db.entries.add(mail, "Cheap pills", content="Limited offer",
                   fetched_at=at(7), entry_type="email", is_spam=True, entry_id="m2")
    db.entries.add_saved(alice, "Saved article about Python", content="Read later",
                         fetched_at=at(8), entry_id="s1")
    db.entries.add(bob_feed, "Python secrets", content="Only bob can see this",
                   fetched_at=at(9), entry_id="b1")

    return {
        "db": db,
        "alice": alice,
        "bob": bob,
        "feeds": {"tech": tech, "news": news, "mail": mail, "bob": bob_feed},
        "subs": {
            "tech": sub_tech,
            "news": sub_news,
            "mail": sub_mail,
            "bob_tech": bob_sub_tech,
            "bob_own": bob_sub_own,
        },
        "tags": {"tech": tag_tech, "bob": bob_tag},
    }


@pytest.fixture
def service(library):
    """EntryService over the seeded library."""
    return EntryService(library["db"])


@pytest.fixture
def raw_conn(library, temp_db_path):
    """A plain connection to the seeded database."""
    with DatabaseConnection(temp_db_path).conn() as connection:
        yield connection


@pytest.fixture
def client(library):
    """Create a test client backed by the seeded library."""
    # Store original state
    original_db = state.db

    state.db = library["db"]

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    state.db = original_db
