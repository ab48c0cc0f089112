"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .ranking import register_functions


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """
        Get database connection with row factory.

        Everything executed inside one block is committed together, so a
        mutation and the counts read back after it see the same state.
        """
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        register_functions(connection)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT UNIQUE NOT NULL,
                    show_spam BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at TIMESTAMP NOT NULL
                );

                CREATE TABLE IF NOT EXISTS feeds (
                    id TEXT PRIMARY KEY,
                    type TEXT NOT NULL CHECK(type IN ('web', 'email')) DEFAULT 'web',
                    url TEXT,
                    title TEXT,
                    site_url TEXT,
                    created_at TIMESTAMP NOT NULL
                );

                CREATE TABLE IF NOT EXISTS entries (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT UNIQUE NOT NULL,
                    feed_id TEXT REFERENCES feeds(id) ON DELETE CASCADE,
                    type TEXT NOT NULL CHECK(type IN ('web', 'email', 'saved')),
                    url TEXT,
                    title TEXT,
                    author TEXT,
                    content TEXT,
                    summary TEXT,
                    site_name TEXT,
                    published_at TIMESTAMP,
                    fetched_at TIMESTAMP NOT NULL,
                    is_spam BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at TIMESTAMP NOT NULL,
                    CHECK ((type = 'saved') = (feed_id IS NULL))
                );

                CREATE TABLE IF NOT EXISTS subscriptions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
                    custom_title TEXT,
                    subscribed_at TIMESTAMP NOT NULL,
                    unsubscribed_at TIMESTAMP,
                    UNIQUE(user_id, feed_id)
                );

                CREATE TABLE IF NOT EXISTS subscription_feeds (
                    subscription_id TEXT NOT NULL REFERENCES subscriptions(id) ON DELETE CASCADE,
                    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    PRIMARY KEY (subscription_id, feed_id),
                    UNIQUE(user_id, feed_id)
                );

                CREATE TABLE IF NOT EXISTS tags (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    name TEXT NOT NULL,
                    color TEXT,
                    created_at TIMESTAMP NOT NULL,
                    UNIQUE(user_id, name)
                );

                CREATE TABLE IF NOT EXISTS subscription_tags (
                    subscription_id TEXT NOT NULL REFERENCES subscriptions(id) ON DELETE CASCADE,
                    tag_id TEXT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                    PRIMARY KEY (subscription_id, tag_id)
                );

                CREATE TABLE IF NOT EXISTS user_entries (
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    entry_id TEXT NOT NULL REFERENCES entries(id) ON DELETE CASCADE,
                    read BOOLEAN NOT NULL DEFAULT FALSE,
                    starred BOOLEAN NOT NULL DEFAULT FALSE,
                    read_changed_at TIMESTAMP,
                    starred_changed_at TIMESTAMP,
                    updated_at TIMESTAMP NOT NULL,
                    PRIMARY KEY (user_id, entry_id)
                );

                CREATE INDEX IF NOT EXISTS idx_entries_feed ON entries(feed_id);
                CREATE INDEX IF NOT EXISTS idx_entries_sort ON entries(COALESCE(published_at, fetched_at) DESC, id DESC);
                CREATE INDEX IF NOT EXISTS idx_subscriptions_user ON subscriptions(user_id, unsubscribed_at);
                CREATE INDEX IF NOT EXISTS idx_subscription_feeds_feed ON subscription_feeds(feed_id);
                CREATE INDEX IF NOT EXISTS idx_subscription_tags_tag ON subscription_tags(tag_id);
                CREATE INDEX IF NOT EXISTS idx_user_entries_entry ON user_entries(entry_id);
                CREATE INDEX IF NOT EXISTS idx_user_entries_unread ON user_entries(user_id, read);

                -- Per-user join of entries with their read/starred state.
                -- Entries of unsubscribed subscriptions stay visible only while starred.
                CREATE VIEW IF NOT EXISTS visible_entries AS
                SELECT ue.user_id,
                       e.id,
                       e.seq,
                       e.feed_id,
                       e.type,
                       e.url,
                       e.title,
                       e.author,
                       e.content,
                       e.summary,
                       e.site_name,
                       e.published_at,
                       e.fetched_at,
                       COALESCE(e.published_at, e.fetched_at) AS sort_at,
                       e.is_spam,
                       ue.read,
                       ue.starred,
                       s.id AS subscription_id,
                       f.title AS feed_title,
                       f.url AS feed_url
                FROM user_entries ue
                JOIN entries e ON e.id = ue.entry_id
                LEFT JOIN subscription_feeds sf ON sf.user_id = ue.user_id AND sf.feed_id = e.feed_id
                LEFT JOIN subscriptions s ON s.id = sf.subscription_id
                LEFT JOIN feeds f ON f.id = e.feed_id
                WHERE s.unsubscribed_at IS NULL OR ue.starred = TRUE;
            """)

            # Create FTS5 virtual table if it doesn't exist
            result = connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='entries_fts'"
            ).fetchone()

            if not result:
                connection.executescript("""
                    CREATE VIRTUAL TABLE entries_fts USING fts5(
                        title,
                        content,
                        content='entries',
                        content_rowid='seq'
                    );

                    CREATE TRIGGER entries_ai AFTER INSERT ON entries BEGIN
                        INSERT INTO entries_fts(rowid, title, content)
                        VALUES (new.seq, new.title, new.content);
                    END;

                    CREATE TRIGGER entries_au AFTER UPDATE ON entries BEGIN
                        INSERT INTO entries_fts(entries_fts, rowid, title, content)
                        VALUES ('delete', old.seq, old.title, old.content);
                        INSERT INTO entries_fts(rowid, title, content)
                        VALUES (new.seq, new.title, new.content);
                    END;

                    CREATE TRIGGER entries_ad AFTER DELETE ON entries BEGIN
                        INSERT INTO entries_fts(entries_fts, rowid, title, content)
                        VALUES ('delete', old.seq, old.title, old.content);
                    END;
                """)
