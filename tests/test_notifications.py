"""
Tests for transient notifications.
"""

from logistica.notifications import NotificationCenter


class TestNotificationCenter:
    def test_notification_expires(self, clock):
        center = NotificationCenter(clock=clock)
        center.notify("Cart updated!", 2.0)

        clock.advance(1.9)
        assert center.current().message == "Cart updated!"

        clock.advance(0.2)
        assert center.current() is None

    def test_newest_replaces_oldest(self, clock):
        center = NotificationCenter(clock=clock)
        center.notify("first", 3.0)
        center.notify("second", 1.5)
        assert center.current().message == "second"

        # The replaced notification does not come back once the newer one expires
        clock.advance(2.0)
        assert center.current() is None

    def test_dismiss(self, clock):
        center = NotificationCenter(clock=clock)
        center.notify("x")
        center.dismiss()
        assert center.current() is None

    def test_empty(self, clock):
        assert NotificationCenter(clock=clock).current() is None
