"""
Subscription repository - a user's subscriptions and the feeds behind them.

A subscription starts with one feed. Further feeds can be merged into it
(for example after a feed moves to a new URL) so its entries keep showing
up in the same list.
"""

import logging
import uuid

from .connection import DatabaseConnection
from .converters import format_timestamp, row_to_subscription, utcnow
from .models import DBSubscription

logger = logging.getLogger(__name__)


class SubscriptionRepository:
    """Repository for subscription operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def subscribe(self, user_id: str, feed_id: str, custom_title: str | None = None) -> str:
        """
        Subscribe a user to a feed. Returns subscription ID.

        Re-subscribing to a feed the user previously left reactivates the old
        subscription, keeping its ID and tags.
        """
        now = format_timestamp(utcnow())
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT id FROM subscriptions WHERE user_id = ? AND feed_id = ?",
                (user_id, feed_id)
            ).fetchone()

            if row:
                subscription_id = row["id"]
                conn.execute(
                    """UPDATE subscriptions
                       SET unsubscribed_at = NULL, subscribed_at = ?,
                           custom_title = COALESCE(?, custom_title)
                       WHERE id = ?""",
                    (now, custom_title, subscription_id)
                )
                logger.info(f"Reactivated subscription {subscription_id} for user {user_id}")
            else:
                subscription_id = str(uuid.uuid4())
                conn.execute(
                    """INSERT INTO subscriptions (id, user_id, feed_id, custom_title, subscribed_at)
                       VALUES (?, ?, ?, ?, ?)""",
                    (subscription_id, user_id, feed_id, custom_title, now)
                )

            conn.execute(
                """INSERT OR IGNORE INTO subscription_feeds (subscription_id, feed_id, user_id)
                   VALUES (?, ?, ?)""",
                (subscription_id, feed_id, user_id)
            )
        return subscription_id

    def unsubscribe(self, user_id: str, subscription_id: str) -> bool:
        """Soft-delete a subscription. Returns False if the user has no such active subscription."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                """UPDATE subscriptions SET unsubscribed_at = ?
                   WHERE id = ? AND user_id = ? AND unsubscribed_at IS NULL""",
                (format_timestamp(utcnow()), subscription_id, user_id)
            )
            return cursor.rowcount > 0

    def add_feed(self, subscription_id: str, feed_id: str) -> bool:
        """
        Merge another feed into a subscription.

        Returns False when the subscription does not exist or the user already
        receives that feed through some subscription.
        """
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT user_id FROM subscriptions WHERE id = ?", (subscription_id,)
            ).fetchone()
            if not row:
                return False
            cursor = conn.execute(
                """INSERT OR IGNORE INTO subscription_feeds (subscription_id, feed_id, user_id)
                   VALUES (?, ?, ?)""",
                (subscription_id, feed_id, row["user_id"])
            )
            return cursor.rowcount > 0

    def get(self, subscription_id: str) -> DBSubscription | None:
        """Get a subscription with all of its feed IDs."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE id = ?", (subscription_id,)
            ).fetchone()
            if not row:
                return None
            feed_rows = conn.execute(
                "SELECT feed_id FROM subscription_feeds WHERE subscription_id = ? ORDER BY feed_id",
                (subscription_id,)
            ).fetchall()
            return row_to_subscription(row, [r["feed_id"] for r in feed_rows])
