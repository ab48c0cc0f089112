"""
Tests for feed-set resolution.
"""

from reader_backend.database.feed_sets import (
    FeedScope,
    get_subscription_feed_ids,
    resolve_feed_set,
)


def _run_subquery(conn, feed_set) -> list[str]:
    subquery = feed_set.condition.subquery
    return sorted(row["feed_id"] for row in conn.execute(subquery.sql, subquery.params))


class TestSubscriptionScope:
    """Tests for resolving a subscription to its feeds."""

    def test_owned_subscription(self, library, raw_conn):
        """An owned subscription resolves to its feed ids."""
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(subscription_id=library["subs"]["tech"]))
        assert not feed_set.is_empty
        assert feed_set.condition.values == (library["feeds"]["tech"],)

    def test_merged_feeds_are_included(self, library, raw_conn):
        """Feeds merged into a subscription are part of its feed set."""
        db = library["db"]
        moved = db.feeds.add("https://tech.example.com/new-feed.xml", "Tech Blog")
        assert db.subscriptions.add_feed(library["subs"]["tech"], moved)

        feed_ids = get_subscription_feed_ids(raw_conn, library["subs"]["tech"], "alice")
        assert sorted(feed_ids) == sorted([library["feeds"]["tech"], moved])

    def test_foreign_subscription_is_empty(self, library, raw_conn):
        """Another user's subscription gives the empty signal, not an error."""
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(subscription_id=library["subs"]["bob_own"]))
        assert feed_set.is_empty

    def test_missing_subscription_is_empty(self, library, raw_conn):
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(subscription_id="no-such-subscription"))
        assert feed_set.is_empty

    def test_unsubscribed_subscription_is_empty(self, library, raw_conn):
        """A soft-deleted subscription no longer resolves."""
        assert library["db"].subscriptions.unsubscribe("alice", library["subs"]["news"])
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(subscription_id=library["subs"]["news"]))
        assert feed_set.is_empty


class TestTagScope:
    """Tests for resolving a tag to the feeds of its subscriptions."""

    def test_owned_tag(self, library, raw_conn):
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(tag_id=library["tags"]["tech"]))
        assert not feed_set.is_empty
        assert _run_subquery(raw_conn, feed_set) == [library["feeds"]["tech"]]

    def test_foreign_tag_yields_no_feeds(self, library, raw_conn):
        """Ownership is enforced by the join, so bob's tag resolves to nothing for alice."""
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(tag_id=library["tags"]["bob"]))
        assert _run_subquery(raw_conn, feed_set) == []

    def test_unsubscribed_subscriptions_drop_out(self, library, raw_conn):
        library["db"].subscriptions.unsubscribe("alice", library["subs"]["tech"])
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(tag_id=library["tags"]["tech"]))
        assert _run_subquery(raw_conn, feed_set) == []


class TestUncategorizedScope:
    """Tests for the untagged-subscriptions anti-join."""

    def test_untagged_feeds(self, library, raw_conn):
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(uncategorized=True))
        expected = sorted([library["feeds"]["news"], library["feeds"]["mail"]])
        assert _run_subquery(raw_conn, feed_set) == expected

    def test_tagging_removes_from_uncategorized(self, library, raw_conn):
        db = library["db"]
        tag = db.tags.create("alice", "World")
        assert db.tags.attach("alice", library["subs"]["news"], tag)

        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope(uncategorized=True))
        assert _run_subquery(raw_conn, feed_set) == [library["feeds"]["mail"]]

    def test_cannot_tag_foreign_subscription(self, library):
        """attach checks that tag and subscription share an owner."""
        db = library["db"]
        assert not db.tags.attach("alice", library["subs"]["bob_own"], library["tags"]["tech"])


class TestScopePrecedence:
    """Tests for how combined or absent scopes resolve."""

    def test_no_scope_is_unrestricted(self, library, raw_conn):
        feed_set = resolve_feed_set(raw_conn, "alice", FeedScope())
        assert not feed_set.is_empty
        assert feed_set.predicates() == []

    def test_subscription_wins_over_tag(self, library, raw_conn):
        scope = FeedScope(subscription_id=library["subs"]["news"], tag_id=library["tags"]["tech"], uncategorized=True)
        feed_set = resolve_feed_set(raw_conn, "alice", scope)
        assert feed_set.condition.values == (library["feeds"]["news"],)

    def test_tag_wins_over_uncategorized(self, library, raw_conn):
        scope = FeedScope(tag_id=library["tags"]["tech"], uncategorized=True)
        feed_set = resolve_feed_set(raw_conn, "alice", scope)
        assert _run_subquery(raw_conn, feed_set) == [library["feeds"]["tech"]]
