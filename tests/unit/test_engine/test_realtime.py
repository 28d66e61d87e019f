"""
Unit tests for realtime channels and the polling feed.
"""

from engine.store.realtime import PollingFeed, RealtimeHub


def _change(table="jam_session_messages", event="INSERT", **row):
    return {"table": table, "eventType": event, "new": row, "old": None}


class TestRealtimeHub:
    """Tests for channel routing."""

    def test_dispatch_matches_table_event_and_filter(self, hub):
        got = []
        hub.channel("jam-session:s1").on(
            "jam_session_messages", got.append, filter=("session_id", "s1")
        ).subscribe()

        assert hub.dispatch(_change(session_id="s1", id=1)) == 1
        assert hub.dispatch(_change(session_id="s2", id=2)) == 0
        assert hub.dispatch(_change(event="UPDATE", session_id="s1", id=3)) == 0
        assert hub.dispatch(_change(table="global_chat", session_id="s1")) == 0
        assert [c["new"]["id"] for c in got] == [1]

    def test_wildcard_event(self, hub):
        got = []
        hub.channel("all").on("friendships", got.append, event="*").subscribe()
        hub.dispatch(_change(table="friendships", event="DELETE"))
        assert len(got) == 1

    def test_channel_inactive_until_subscribed(self, hub):
        got = []
        channel = hub.channel("later").on("global_chat", got.append)
        hub.dispatch(_change(table="global_chat"))
        assert got == []
        channel.subscribe()
        hub.dispatch(_change(table="global_chat"))
        assert len(got) == 1

    def test_unsubscribe_removes_channel(self, hub):
        channel = hub.channel("c").on("global_chat", lambda change: None).subscribe()
        channel.unsubscribe()
        assert "c" not in hub.channels

    def test_same_name_replaces(self, hub):
        first, second = [], []
        hub.channel("c").on("global_chat", first.append).subscribe()
        hub.channel("c").on("global_chat", second.append).subscribe()
        hub.dispatch(_change(table="global_chat"))
        assert first == [] and len(second) == 1


class TestPollingFeed:
    """Tests for PollingFeed."""

    def test_poll_dispatches_and_advances_cursor(self, store_client, fake_store, hub):
        fake_store.add("GET", "global_chat", [
            {"id": 1, "channel": "general", "created_at": "2024-01-01T00:00:01Z"},
            {"id": 2, "channel": "general", "created_at": "2024-01-01T00:00:02Z"},
        ])
        fake_store.add("GET", "global_chat", [])
        got = []
        hub.channel("chat").on("global_chat", got.append).subscribe()

        feed = PollingFeed(store_client, hub, "global_chat", filter=("channel", "general"),
                           since="2024-01-01T00:00:00Z")
        assert feed.poll() == 2
        assert feed.cursor == "2024-01-01T00:00:02Z"
        assert [c["new"]["id"] for c in got] == [1, 2]

        feed.poll()
        second = fake_store.calls("GET", "global_chat")[1]
        params = fake_store.params(second)
        assert ("channel", "eq.general") in params
        assert ("created_at", "gte.2024-01-01T00:00:02Z") in params
        assert ("order", "created_at.asc") in params

    def test_update_waits_for_interval(self, store_client, fake_store, hub):
        feed = PollingFeed(store_client, hub, "global_chat", interval=2.0)
        feed.update(1.0)
        assert fake_store.requests == []
        feed.update(1.0)
        assert len(fake_store.requests) == 1

    def test_failure_kept_and_cursor_unchanged(self, store_client, fake_store, hub):
        fake_store.error("GET", "global_chat", "42501")
        feed = PollingFeed(store_client, hub, "global_chat", since="2024-01-01T00:00:00Z")
        assert feed.poll() == 0
        assert feed.last_error is not None
        assert feed.cursor == "2024-01-01T00:00:00Z"

    def test_feed_without_since_skips_history(self, store_client, fake_store, hub):
        fake_store.add("GET", "global_chat", [{"id": 40, "created_at": "2024-03-01T10:00:00Z"}])
        fake_store.add("GET", "global_chat", [
            {"id": 40, "created_at": "2024-03-01T10:00:00Z"},
            {"id": 41, "created_at": "2024-03-01T10:00:05Z"},
        ])
        got = []
        hub.channel("chat").on("global_chat", got.append).subscribe()

        feed = PollingFeed(store_client, hub, "global_chat")
        assert feed.poll() == 0
        assert got == []
        assert feed.cursor == "2024-03-01T10:00:00Z"
        newest = fake_store.calls("GET", "global_chat")[0]
        assert ("order", "created_at.desc") in fake_store.params(newest)
        assert ("limit", "1") in fake_store.params(newest)

        assert feed.poll() == 1
        assert [c["new"]["id"] for c in got] == [41]
        second = fake_store.calls("GET", "global_chat")[1]
        assert ("created_at", "gte.2024-03-01T10:00:00Z") in fake_store.params(second)

    def test_empty_table_delivers_everything_after_start(self, store_client, fake_store, hub):
        fake_store.add("GET", "global_chat", [])
        fake_store.add("GET", "global_chat", [{"id": 1, "created_at": "2024-03-01T10:00:00Z"}])
        feed = PollingFeed(store_client, hub, "global_chat")
        assert feed.poll() == 0
        assert feed.cursor is None
        assert feed.poll() == 1

    def test_shared_timestamp_across_batches(self, store_client, fake_store, hub):
        stamp = "2024-03-01T10:00:00Z"
        fake_store.add("GET", "global_chat", [{"id": 1, "created_at": stamp}, {"id": 2, "created_at": stamp}])
        fake_store.add("GET", "global_chat", [{"id": 1, "created_at": stamp}, {"id": 2, "created_at": stamp},
                                              {"id": 3, "created_at": stamp}])
        got = []
        hub.channel("chat").on("global_chat", got.append).subscribe()

        feed = PollingFeed(store_client, hub, "global_chat", since="2024-03-01T09:00:00Z", batch_size=2)
        assert feed.poll() == 2
        assert feed.poll() == 1
        assert [c["new"]["id"] for c in got] == [1, 2, 3]
