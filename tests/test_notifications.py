"""
Tests for the notification feed.
"""
from jobboard.services.notifications import NotificationLevel, Notifier


def test_drain_returns_oldest_first_and_clears():
    notifier = Notifier()
    notifier.success("Job posted successfully")
    notifier.error("Failed to load companies")

    drained = notifier.drain()

    assert [(n.level, n.message) for n in drained] == [
        (NotificationLevel.SUCCESS, "Job posted successfully"),
        (NotificationLevel.ERROR, "Failed to load companies"),
    ]
    assert notifier.drain() == []


def test_pending_does_not_clear():
    notifier = Notifier()
    notifier.success("Application status updated")

    assert len(notifier.pending()) == 1
    assert len(notifier.pending()) == 1


def test_feed_is_bounded():
    """Test the oldest notifications are dropped once the feed is full."""
    notifier = Notifier(max_pending=2)
    for i in range(3):
        notifier.error(f"error {i}")

    assert [n.message for n in notifier.drain()] == ["error 1", "error 2"]
