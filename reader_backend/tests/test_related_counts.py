"""
Tests for the absolute count payloads pushed after entry events.
"""

from reader_backend.database.models import EntryContext, EntryCounts, ListUnread, UncategorizedUnread


class TestEntryRelatedCounts:
    """Tests for get_entry_related_counts."""

    def test_tagged_subscription(self, library, service):
        """An entry in a tagged subscription reports its tags, not uncategorized."""
        counts = service.get_entry_related_counts("alice", "t1")
        assert counts.all == EntryCounts(total=7, unread=7)
        assert counts.starred == EntryCounts(total=0, unread=0)
        assert counts.saved is None
        assert counts.subscription == ListUnread(id=library["subs"]["tech"], unread=3)
        assert counts.tags == [ListUnread(id=library["tags"]["tech"], unread=3)]
        assert counts.uncategorized is None

    def test_uncategorized_subscription(self, library, service):
        counts = service.get_entry_related_counts("alice", "n1")
        assert counts.subscription == ListUnread(id=library["subs"]["news"], unread=2)
        assert counts.tags is None
        assert counts.uncategorized == UncategorizedUnread(unread=3)

    def test_saved_entry(self, service):
        """Saved entries only carry the saved totals."""
        counts = service.get_entry_related_counts("alice", "s1")
        assert counts.saved == EntryCounts(total=1, unread=1)
        assert counts.subscription is None
        assert counts.tags is None
        assert counts.uncategorized is None

    def test_reflects_state_changes(self, library, service):
        service.mark_entries_read("alice", ["t1", "t2"])
        service.update_entry_starred("alice", "t3", True)
        counts = service.get_entry_related_counts("alice", "t3")
        assert counts.all == EntryCounts(total=7, unread=5)
        assert counts.starred == EntryCounts(total=1, unread=1)
        assert counts.subscription == ListUnread(id=library["subs"]["tech"], unread=1)

    def test_agrees_with_count_entries(self, library, service):
        """Pushed counts are the same numbers count_entries would return."""
        service.mark_entries_read("alice", ["n1", "m1"])
        counts = service.get_entry_related_counts("alice", "n2")
        assert counts.all.unread == service.count_entries("alice").unread
        assert counts.uncategorized.unread == service.count_entries("alice", uncategorized=True).unread
        assert counts.subscription.unread == service.count_entries(
            "alice", subscription_id=library["subs"]["news"]
        ).unread

    def test_unknown_entry(self, service):
        """An entry the user cannot see yields only zeroed baselines."""
        counts = service.get_entry_related_counts("alice", "b1")
        assert counts.all == EntryCounts(total=0, unread=0)
        assert counts.starred == EntryCounts(total=0, unread=0)
        assert counts.saved is None
        assert counts.subscription is None


class TestNewEntryRelatedCounts:
    """Tests for get_new_entry_related_counts."""

    def test_web_entry(self, library, service):
        counts = service.get_new_entry_related_counts("alice", "web", library["subs"]["tech"])
        assert counts.subscription == ListUnread(id=library["subs"]["tech"], unread=3)
        assert counts.tags == [ListUnread(id=library["tags"]["tech"], unread=3)]

    def test_saved_entry(self, service):
        counts = service.get_new_entry_related_counts("alice", "saved", None)
        assert counts.saved == EntryCounts(total=1, unread=1)
        assert counts.subscription is None


class TestBulkEntryRelatedCounts:
    """Tests for get_bulk_entry_related_counts."""

    def test_mixed_batch(self, library, service):
        entries = [
            EntryContext(subscription_id=library["subs"]["tech"], type="web"),
            EntryContext(subscription_id=library["subs"]["news"], type="web"),
            EntryContext(subscription_id=library["subs"]["news"], type="web"),
            EntryContext(subscription_id=None, type="saved"),
        ]
        counts = service.get_bulk_entry_related_counts("alice", entries)

        assert counts.all == EntryCounts(total=7, unread=7)
        assert counts.saved == EntryCounts(total=1, unread=1)
        assert {c.id: c.unread for c in counts.subscriptions} == {
            library["subs"]["tech"]: 3,
            library["subs"]["news"]: 2,
        }
        assert counts.tags == [ListUnread(id=library["tags"]["tech"], unread=3)]
        assert counts.uncategorized == UncategorizedUnread(unread=3)

    def test_tagged_only_batch_skips_uncategorized(self, library, service):
        entries = [EntryContext(subscription_id=library["subs"]["tech"], type="web")]
        counts = service.get_bulk_entry_related_counts("alice", entries)
        assert counts.uncategorized is None

    def test_empty_batch(self, service):
        counts = service.get_bulk_entry_related_counts("alice", [])
        assert counts.subscriptions == []
        assert counts.tags == []
        assert counts.uncategorized is None
