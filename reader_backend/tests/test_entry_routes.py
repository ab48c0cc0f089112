"""
Tests for entry routes and HTTP error mapping.
"""

import pytest

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


class TestHealthCheck:
    """Tests for /status endpoint."""

    def test_health_check_returns_ok(self, client):
        response = client.get("/status")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data
        assert data["database_initialized"] is True


class TestUserIdentity:
    """Tests for the X-User-Id requirement."""

    def test_missing_header_is_401(self, client):
        response = client.get("/entries")
        assert response.status_code == 401

    def test_blank_header_is_401(self, client):
        response = client.get("/entries", headers={"X-User-Id": "  "})
        assert response.status_code == 401


class TestListRoute:
    """Tests for GET /entries."""

    def test_list_entries(self, client):
        response = client.get("/entries", headers=ALICE)
        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data["items"]] == ["s1", "m1", "n2", "n1", "t3", "t2", "t1"]
        assert data["next_cursor"] is None

    def test_has_required_fields(self, client):
        entry = client.get("/entries?limit=1", headers=ALICE).json()["items"][0]
        for field in ("id", "subscription_id", "feed_id", "type", "title", "fetched_at", "read", "starred"):
            assert field in entry
        assert "content" not in entry

    def test_follows_cursor(self, client):
        first = client.get("/entries?limit=4", headers=ALICE).json()
        assert len(first["items"]) == 4
        second = client.get("/entries", params={"limit": 4, "cursor": first["next_cursor"]}, headers=ALICE).json()
        assert [e["id"] for e in second["items"]] == ["t3", "t2", "t1"]
        assert second["next_cursor"] is None

    def test_oversized_limit_is_capped_not_rejected(self, client):
        response = client.get("/entries?limit=1000", headers=ALICE)
        assert response.status_code == 200

    def test_invalid_cursor_is_400(self, client):
        response = client.get("/entries?cursor=garbage", headers=ALICE)
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid cursor format", "code": "VALIDATION_ERROR"}

    def test_invalid_sort_order_is_422(self, client):
        response = client.get("/entries?sort_order=sideways", headers=ALICE)
        assert response.status_code == 422

    def test_filters(self, library, client):
        params = [("exclude_types", "saved"), ("exclude_types", "email"), ("sort_order", "oldest")]
        response = client.get("/entries", params=params, headers=ALICE)
        assert [e["id"] for e in response.json()["items"]] == ["t1", "t2", "t3", "n1", "n2"]

        response = client.get(f"/entries?tag_id={library['tags']['tech']}", headers=ALICE)
        assert [e["id"] for e in response.json()["items"]] == ["t3", "t2", "t1"]

    def test_foreign_subscription_is_empty_not_error(self, library, client):
        response = client.get(f"/entries?subscription_id={library['subs']['bob_own']}", headers=ALICE)
        assert response.status_code == 200
        assert response.json() == {"items": [], "next_cursor": None}

    def test_spam_follows_user_preference(self, library, client):
        assert "m2" not in [e["id"] for e in client.get("/entries", headers=ALICE).json()["items"]]

        library["db"].users.set_show_spam("alice", True)
        assert "m2" in [e["id"] for e in client.get("/entries", headers=ALICE).json()["items"]]

        response = client.get("/entries?show_spam=false", headers=ALICE)
        assert "m2" not in [e["id"] for e in response.json()["items"]]


class TestSearchRoute:
    """Tests for GET /entries/search."""

    def test_requires_query(self, client):
        response = client.get("/entries/search", headers=ALICE)
        assert response.status_code == 422

    def test_search(self, client):
        response = client.get("/entries/search?q=python&search_in=title", headers=ALICE)
        assert response.status_code == 200
        assert sorted(e["id"] for e in response.json()["items"]) == ["s1", "t1", "t3"]

    def test_bob_sees_his_own_results(self, client):
        response = client.get("/entries/search?q=python", headers=BOB)
        assert sorted(e["id"] for e in response.json()["items"]) == ["b1", "t1", "t3"]


class TestCountRoute:
    """Tests for GET /entries/count."""

    def test_count(self, client):
        response = client.get("/entries/count", headers=ALICE)
        assert response.status_code == 200
        assert response.json() == {"total": 7, "unread": 7}

    def test_count_scoped(self, library, client):
        response = client.get(f"/entries/count?subscription_id={library['subs']['news']}", headers=ALICE)
        assert response.json() == {"total": 2, "unread": 2}


class TestEntryDetailRoute:
    """Tests for GET /entries/{id}."""

    def test_get_entry(self, client):
        response = client.get("/entries/t1", headers=ALICE)
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Python packaging guide"
        assert data["content"] == "How to build wheels with setuptools"

    def test_foreign_entry_is_404(self, client):
        response = client.get("/entries/b1", headers=ALICE)
        assert response.status_code == 404
        assert response.json() == {"detail": "Entry not found", "code": "ENTRY_NOT_FOUND"}

    def test_entry_counts(self, library, client):
        response = client.get("/entries/n1/counts", headers=ALICE)
        assert response.status_code == 200
        data = response.json()
        assert data["all"] == {"total": 7, "unread": 7}
        assert data["subscription"] == {"id": library["subs"]["news"], "unread": 2}
        assert data["tags"] is None
        assert data["uncategorized"] == {"unread": 3}


class TestStateRoutes:
    """Tests for read/starred mutations."""

    def test_mark_read(self, library, client):
        response = client.post("/entries/read", json={"entry_ids": ["t1", "t2"]}, headers=ALICE)
        assert response.status_code == 200
        data = response.json()
        assert data["entries"] == [
            {"id": "t1", "read": True, "starred": False},
            {"id": "t2", "read": True, "starred": False},
        ]
        assert data["subscription_unread_counts"] == [
            {"subscription_id": library["subs"]["tech"], "unread_count": 1}
        ]
        assert data["tag_unread_counts"] == [
            {"tag_id": library["tags"]["tech"], "unread_count": 1}
        ]

    def test_mark_unread(self, client):
        client.post("/entries/read", json={"entry_ids": ["n1"]}, headers=ALICE)
        response = client.post("/entries/read", json={"entry_ids": ["n1"], "read": False}, headers=ALICE)
        assert response.json()["entries"] == [{"id": "n1", "read": False, "starred": False}]

    def test_mark_read_too_many_is_400(self, client):
        ids = [f"id{i}" for i in range(1001)]
        response = client.post("/entries/read", json={"entry_ids": ids}, headers=ALICE)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_mark_read_bad_body_is_422(self, client):
        response = client.post("/entries/read", json={"entry_ids": "t1"}, headers=ALICE)
        assert response.status_code == 422

    def test_mark_all_read(self, library, client):
        response = client.post(
            "/entries/mark-all-read",
            json={"subscription_id": library["subs"]["tech"]},
            headers=ALICE,
        )
        assert response.status_code == 200
        assert response.json() == {"count": 3}

    def test_mark_all_read_before(self, client):
        response = client.post(
            "/entries/mark-all-read",
            json={"before": "2024-01-01T02:00:00Z"},
            headers=ALICE,
        )
        assert response.json() == {"count": 2}

    def test_star(self, client):
        response = client.put("/entries/n2/starred", json={"starred": True}, headers=ALICE)
        assert response.status_code == 200
        assert response.json() == {"id": "n2", "read": False, "starred": True}

    @pytest.mark.parametrize("entry_id", ["b1", "missing"])
    def test_star_not_found(self, client, entry_id):
        response = client.put(f"/entries/{entry_id}/starred", json={"starred": True}, headers=ALICE)
        assert response.status_code == 404
        assert response.json()["code"] == "ENTRY_NOT_FOUND"
