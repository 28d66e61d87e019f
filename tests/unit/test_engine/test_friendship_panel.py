"""
Unit tests for the friendship panel.
"""

import pytest

from ui.panels.friendships import DEFAULT_PERMISSIONS, FriendshipPanel

FRIENDSHIPS = [
    {"id": "f1", "requestor_id": "p-1", "addressee_id": "p-2", "status": "accepted"},
    {"id": "f2", "requestor_id": "p-3", "addressee_id": "p-1", "status": "pending"},
    {"id": "f3", "requestor_id": "p-1", "addressee_id": "p-4", "status": "pending"},
]
PROFILES = [
    {"id": "p-2", "user_id": "u-2", "username": "bo", "display_name": "Bo Diddley"},
    {"id": "p-3", "user_id": "u-3", "username": "cat"},
    {"id": "p-4", "user_id": "u-4", "username": "dee"},
]


def _event(event_id, activity, affinity):
    return {
        "id": event_id, "user_id": "u-1", "activity_type": activity, "message": "",
        "metadata": {"relationship_profile_id": "p-2", "affinity_value": affinity},
        "created_at": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def panel(store_client, toasts, hub, fake_store):
    fake_store.add("GET", "friendships", FRIENDSHIPS)
    fake_store.add("GET", "profiles", PROFILES)
    friends = FriendshipPanel(store_client, toasts, hub, "u-1", "p-1")
    assert friends.load()
    return friends


class TestFriendList:
    """Tests for the friend list and requests."""

    def test_groups(self, panel):
        assert [f["friendship"]["id"] for f in panel.accepted] == ["f1"]
        assert [f["friendship"]["id"] for f in panel.incoming] == ["f2"]
        assert [f["friendship"]["id"] for f in panel.outgoing] == ["f3"]

    def test_load_needs_profile(self, store_client, toasts, hub):
        assert not FriendshipPanel(store_client, toasts, hub, "u-1", None).load()

    def test_search_excludes_self_and_friends(self, panel, fake_store):
        fake_store.set("GET", "profiles", [{"id": "p-9", "username": "eve"}])
        results = panel.search("e")
        assert results == [{"id": "p-9", "username": "eve"}]
        search = fake_store.calls("GET", "profiles")[-1]
        assert ("id", "not.in.(p-1,p-2,p-3,p-4)") in fake_store.params(search)

    def test_send_request(self, panel, toasts, fake_store):
        panel.search_results = [{"id": "p-9"}]
        assert panel.send_request("p-9")
        assert toasts.latest.title == "Friend request sent"
        assert panel.search_results == []
        assert len(fake_store.calls("GET", "friendships")) == 2

    def test_request_to_self_refused(self, panel, toasts):
        assert not panel.send_request("p-1")
        assert toasts.latest.title == "Unable to send request"
        assert toasts.latest.description == "You can't send a request to yourself."

    def test_respond(self, panel, toasts):
        assert panel.respond("f2", "accepted")
        assert len(panel.accepted) == 2
        assert toasts.latest.title == "Request updated"

    def test_cancel(self, panel):
        assert panel.cancel("f3")
        assert panel.outgoing == []


class TestSelectedFriend:
    """Tests for the relationship view with one friend."""

    def test_select_builds_summary(self, panel, hub, fake_store):
        fake_store.add("GET", "activity_feed", [_event("e1", "relationship_gig", 150),
                                                _event("e2", "relationship_collab", 150)])
        fake_store.add("GET", "activity_feed", [])
        assert panel.select("f1")
        assert panel.summary.affinity_score == 300
        assert panel.summary.tier_id == "bandmate"
        assert panel.dm_channel == "dm:p-1:p-2"
        assert "relationship-dm:dm:p-1:p-2" in hub.channels
        assert panel.permissions == DEFAULT_PERMISSIONS

        events_read = fake_store.calls("GET", "activity_feed")[0]
        assert ("user_id", "in.(u-1,u-2)") in fake_store.params(events_read)

    def test_select_falls_back_when_feed_refused(self, panel, toasts, fake_store):
        fake_store.error("GET", "activity_feed", "42501")
        fake_store.add("GET", "activity_feed", [_event("e1", "relationship_jam", 40)])
        fake_store.add("GET", "activity_feed", [])
        assert panel.select("f1")
        assert panel.summary.affinity_score == 40
        assert toasts.latest is None

    def test_select_pending_without_profile(self, panel):
        panel.friendships[0]["other_profile"] = None
        assert not panel.select("f1")

    def test_stored_permissions_merge_defaults(self, panel, fake_store):
        fake_store.add("GET", "activity_feed", [])
        fake_store.add("GET", "activity_feed", [{"metadata": {"permissions": {"share_schedule": True}}}])
        panel.select("f1")
        assert panel.permissions == {**DEFAULT_PERMISSIONS, "share_schedule": True}

    def test_direct_messages_arrive(self, panel, hub):
        panel.select("f1")
        hub.dispatch({"table": "global_chat", "eventType": "INSERT",
                      "new": {"id": 7, "channel": "dm:p-1:p-2", "message": "yo"}, "old": None})
        hub.dispatch({"table": "global_chat", "eventType": "INSERT",
                      "new": {"id": 7, "channel": "dm:p-1:p-2", "message": "yo"}, "old": None})
        assert [m["id"] for m in panel.messages] == [7]

    def test_deselect_unsubscribes(self, panel, hub):
        panel.select("f1")
        panel.deselect()
        assert hub.channels == {}
        assert panel.summary is None

    def test_send_message(self, panel, fake_store):
        assert not panel.send_message("hi")
        panel.select("f1")
        assert panel.send_message("hi")
        body = fake_store.body(fake_store.calls("POST", "global_chat")[0])
        assert body == {"channel": "dm:p-1:p-2", "user_id": "u-1", "message": "hi"}

    def test_record_interaction_reselects(self, panel, fake_store):
        panel.select("f1")
        assert panel.record_interaction("relationship_jam", "Jammed together")
        body = fake_store.body(fake_store.calls("POST", "activity_feed")[0])
        assert body["activity_type"] == "relationship_jam"
        assert body["metadata"]["other_profile_user_id"] == "u-2"
        assert panel.selected["friendship"]["id"] == "f1"

    def test_save_permissions(self, panel, toasts, fake_store):
        panel.select("f1")
        fake_store.set("GET", "profiles", [{"user_id": "u-1"}])
        assert panel.save_permissions(share_finances=True)
        assert panel.permissions["share_finances"] is True
        assert toasts.latest.title == "Permissions updated"

    def test_rows(self, panel, fake_store):
        fake_store.add("GET", "activity_feed", [_event("e1", "relationship_gig", 300)])
        fake_store.add("GET", "activity_feed", [])
        panel.select("f1")
        texts = [r.text for r in panel.rows()]
        assert "Bo Diddley" in texts
        assert "Tier: Bandmate (250-599)" in texts
        assert "--- Messages ---" in texts
